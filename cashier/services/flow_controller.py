from __future__ import annotations

import logging
from typing import Callable

from cashier.core.errors import ValidationError
from cashier.model.cart_data import CartData
from cashier.model.identity import Confirmed
from cashier.model.session import InventoryItem, Session, Step
from cashier.services.cashier_api import ApiResult, CashierApi, Dispatcher
from cashier.services.checkout import CheckoutSubmitter
from cashier.services.identity_resolver import IdentityResolver

logger = logging.getLogger(__name__)


class SessionController:
    """Catalogue -> Identify -> Checkout, behind the operator login.

    Transitions return False when their precondition does not hold; the
    screens keep the matching button disabled, so that is not an error.
    """

    def __init__(self, api: CashierApi, dispatch: Dispatcher, token_store,
                 on_change: Callable[[], None] | None = None):
        self.api = api
        self.dispatch = dispatch
        self.token_store = token_store
        self.on_change = on_change or (lambda: None)

        self.session = Session()
        self.cart = CartData()
        self.resolver = IdentityResolver(self.session, api, dispatch, on_change=self._notify)
        self.checkout = CheckoutSubmitter(self.session, self.cart, api, dispatch, on_change=self._notify)

        self.login_error = ""
        self.logging_in = False
        self.inventory: list[InventoryItem] = []
        self.inventory_error = ""
        self.inventory_loading = False

    def _notify(self):
        self.on_change()

    @property
    def is_logged_in(self) -> bool:
        return self.session.is_logged_in

    @property
    def step(self) -> Step | None:
        """Current step, None while logged out."""
        return self.session.step if self.is_logged_in else None

    @property
    def can_go_to_identify(self) -> bool:
        return self.step is Step.CATALOGUE and self.cart.total_selected_count() > 0

    # authentication
    def restore(self) -> bool:
        token = self.token_store.load()
        if token:
            self._start_session(token)
            logger.info("[Session] restored saved login")
        return self.is_logged_in

    def login(self, shop_nickname: str, account_name: str, password: str):
        if not (shop_nickname.strip() and account_name.strip() and password):
            raise ValidationError("Please fill in shop, account and password.")
        self.login_error = ""
        self.logging_in = True

        def on_login(result: ApiResult):
            self.logging_in = False
            token = result.data.get("token") if result.ok else None
            if token:
                self.token_store.save(token)
                self._start_session(token)
                logger.info(f"[Login] logged in to shop '{shop_nickname}' as '{account_name}'")
            else:
                self.login_error = result.error_message("Login failed")
                logger.warning(f"[Login] failed ({result.status}): {self.login_error}")
            self._notify()

        self.dispatch(lambda: self.api.login(shop_nickname.strip(), account_name.strip(), password), on_login)

    def _start_session(self, token: str):
        self.session.token = token
        self.session.step = Step.CATALOGUE
        self.login_error = ""

    def logout(self):
        self.token_store.clear()
        self.session.token = ""
        self._reset_customer()
        self.inventory = []
        self.inventory_error = ""
        logger.info("[Session] logged out")
        self._notify()

    # catalogue
    def load_inventory(self):
        if not self.is_logged_in:
            return
        self.inventory_error = ""
        self.inventory_loading = True
        token = self.session.token

        def on_loaded(result: ApiResult):
            self.inventory_loading = False
            if token != self.session.token:
                return
            if result.ok:
                self.inventory = [InventoryItem.model_validate(i) for i in result.data.get("items", [])]
                logger.info(f"[Catalogue] {len(self.inventory)} items loaded")
            else:
                self.inventory_error = result.error_message("Error loading items")
                logger.error(f"[Catalogue] loading failed: {self.inventory_error}")
            self._notify()

        self.dispatch(lambda: self.api.fetch_inventory(token), on_loaded)

    # flow
    def go_to_identify(self) -> bool:
        if not self.can_go_to_identify:
            return False
        self._set_step(Step.IDENTIFY)
        return True

    def back_to_catalogue(self) -> bool:
        if self.step is not Step.IDENTIFY:
            return False
        self.resolver.reset()
        self._set_step(Step.CATALOGUE)
        return True

    def continue_to_checkout(self) -> Confirmed:
        if self.step is not Step.IDENTIFY:
            raise ValidationError("Customer identification is not open.")
        confirmed = self.resolver.continue_with_best()
        self.session.identity = confirmed
        self.checkout.load_details()
        self._set_step(Step.CHECKOUT)
        return confirmed

    def back_to_identify(self) -> bool:
        if self.step is not Step.CHECKOUT:
            return False
        self._set_step(Step.IDENTIFY)
        return True

    def submit(self):
        if self.step is not Step.CHECKOUT:
            raise ValidationError("Checkout is not open.")
        self.checkout.submit(self.session.identity)

    def next_customer(self) -> bool:
        if self.step is not Step.CHECKOUT:
            return False
        self._reset_customer()
        logger.info("[Session] ready for the next customer")
        self._notify()
        return True

    def _reset_customer(self):
        self.cart.clear()
        self.resolver.reset()
        self.checkout.reset()
        self.session.identity = None
        self.session.step = Step.CATALOGUE

    def _set_step(self, step: Step):
        logger.info(f"[Session] {self.session.step.name} -> {step.name}")
        self.session.step = step
        self._notify()
