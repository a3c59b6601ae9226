"""Shared fixtures: fake backend, dispatchers and a logged-in session."""

from unittest.mock import MagicMock

import pytest

from cashier.model.session import Session
from cashier.services.cashier_api import ApiResult, CashierApi


class InlineDispatcher:
    """Runs every backend call immediately, like a response that arrives at once."""

    def __init__(self):
        self.calls = 0

    def __call__(self, call, on_done):
        self.calls += 1
        on_done(call())


class DeferredDispatcher:
    """Holds calls until the test completes them, to model in-flight requests."""

    def __init__(self):
        self.pending = []

    def __call__(self, call, on_done):
        self.pending.append((call, on_done))

    def complete(self, index=0):
        call, on_done = self.pending.pop(index)
        on_done(call())

    def complete_all(self):
        while self.pending:
            self.complete()


class MemoryTokenStore:
    def __init__(self, token=""):
        self.token = token

    def load(self):
        return self.token

    def save(self, token):
        self.token = token

    def clear(self):
        self.token = ""


def ok(data=None):
    return ApiResult(200, data or {})


def fail(status, detail=None):
    return ApiResult(status, {"detail": detail} if detail else {})


@pytest.fixture
def api():
    return MagicMock(spec=CashierApi)


@pytest.fixture
def inline():
    return InlineDispatcher()


@pytest.fixture
def deferred():
    return DeferredDispatcher()


@pytest.fixture
def session():
    return Session(token="tok-123")


@pytest.fixture
def token_store():
    return MemoryTokenStore()
