# tests/test_checkout.py
"""Tests for the checkout submitter."""

import pytest

from cashier.core.errors import ValidationError
from cashier.model.cart_data import CartData
from cashier.model.identity import Confirmed, Profile
from cashier.services.checkout import CheckoutSubmitter

from conftest import fail, ok

USER_X = Confirmed(Profile(uid="userX", first_name="X", user_name="x"))


@pytest.fixture
def cart():
    cart = CartData()
    cart.set_quantity("itemA", 2)
    return cart


@pytest.fixture
def checkout(session, cart, api, inline):
    return CheckoutSubmitter(session, cart, api, inline)


def test_details_are_fetched_for_exactly_the_cart(checkout, cart, api, session):
    cart.set_quantity("itemB", 1)
    api.get_items_details.return_value = ok({"items": [
        {"iid": "itemA", "name": "Tea", "price": 450},
        {"iid": "itemB", "name": "Cake", "price": 1200, "photo_url": None},
    ]})

    checkout.load_details()

    api.get_items_details.assert_called_once_with(session.token, ["itemA", "itemB"])
    assert [item.name for item in checkout.items] == ["Tea", "Cake"]
    assert checkout.loading is False


def test_numeric_item_ids_are_accepted(checkout, api):
    api.get_items_details.return_value = ok({"items": [{"iid": 7, "name": "Tea", "price": 450}]})
    checkout.load_details()
    assert checkout.items[0].iid == "7"


def test_detail_failure_sets_error(checkout, api):
    api.get_items_details.return_value = fail(500)
    checkout.load_details()
    assert checkout.error == "Failed to fetch item details."
    assert checkout.items == []


def test_empty_cart_is_rejected_locally(checkout, cart, api):
    cart.clear()
    with pytest.raises(ValidationError, match="No items selected."):
        checkout.load_details()
    with pytest.raises(ValidationError, match="No items selected."):
        checkout.submit(USER_X)
    api.get_items_details.assert_not_called()
    api.record_transaction.assert_not_called()


def test_submit_sends_transaction_body(checkout, api, session):
    api.record_transaction.return_value = ok({"ok": True})

    checkout.submit(USER_X)

    api.record_transaction.assert_called_once_with(
        session.token, {"user_id": "userX", "item_id_quantity": [["itemA", 2]]}
    )
    assert checkout.committed
    assert checkout.status == "Transaction successful!"
    assert checkout.transaction.user_id == "userX"


def test_submit_failure_shows_backend_detail(checkout, api):
    api.record_transaction.return_value = fail(400, "Item out of stock")
    checkout.submit(USER_X)
    assert checkout.error == "Item out of stock"
    assert not checkout.committed


def test_failed_submit_can_be_retried_by_operator(checkout, api):
    api.record_transaction.return_value = fail(0, "Network error")
    checkout.submit(USER_X)
    api.record_transaction.return_value = ok()
    checkout.submit(USER_X)
    assert checkout.committed
    assert api.record_transaction.call_count == 2


def test_submit_without_identity_is_rejected(checkout, api):
    with pytest.raises(ValidationError):
        checkout.submit(None)
    api.record_transaction.assert_not_called()


def test_double_submit_is_rejected(session, cart, api, deferred):
    checkout = CheckoutSubmitter(session, cart, api, deferred)
    checkout.submit(USER_X)
    with pytest.raises(ValidationError):
        checkout.submit(USER_X)
    api.record_transaction.return_value = ok()
    deferred.complete()
    with pytest.raises(ValidationError):
        checkout.submit(USER_X)
    assert api.record_transaction.call_count == 1


def test_transaction_is_immutable(checkout, api):
    api.record_transaction.return_value = ok()
    checkout.submit(USER_X)
    with pytest.raises(Exception):
        checkout.transaction.user_id = "other"


def test_reset_clears_commit(checkout, api):
    api.record_transaction.return_value = ok()
    checkout.submit(USER_X)
    checkout.reset()
    assert not checkout.committed
    assert checkout.status == ""
    assert checkout.transaction is None
