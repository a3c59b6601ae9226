from __future__ import annotations

import logging
from typing import Callable

from cashier.core.errors import ValidationError
from cashier.model.cart_data import CartData
from cashier.model.identity import Confirmed
from cashier.model.session import InventoryItem, Session, Transaction
from cashier.services.cashier_api import ApiResult, CashierApi, Dispatcher

logger = logging.getLogger(__name__)


class CheckoutSubmitter:
    """Shows fresh item details for the cart and records the transaction."""

    def __init__(self, session: Session, cart: CartData, api: CashierApi, dispatch: Dispatcher,
                 on_change: Callable[[], None] | None = None):
        self.session = session
        self.cart = cart
        self.api = api
        self.dispatch = dispatch
        self.on_change = on_change or (lambda: None)
        self._generation = 0
        self._clear()

    def _clear(self):
        self.items: list[InventoryItem] = []
        self.loading = False
        self.submitting = False
        self.committed = False
        self.transaction: Transaction | None = None
        self.error = ""
        self.status = ""

    def _guard(self, handler):
        generation = self._generation

        def on_done(result: ApiResult):
            if generation != self._generation:
                return
            handler(result)
            self.on_change()
        return on_done

    def load_details(self):
        """Fetch details for exactly the items in the cart; prices may have changed."""
        if self.cart.is_empty():
            raise ValidationError("No items selected.")
        self.error = ""
        self.loading = True
        item_ids = self.cart.get_item_ids()
        token = self.session.token

        def on_loaded(result: ApiResult):
            self.loading = False
            if result.ok:
                self.items = [InventoryItem.model_validate(i) for i in result.data.get("items", [])]
                logger.info(f"[Checkout] loaded details for {len(self.items)} items")
            else:
                self.error = result.error_message("Failed to fetch item details.")
                logger.error(f"[Checkout] item details failed: {self.error}")

        self.dispatch(lambda: self.api.get_items_details(token, item_ids), self._guard(on_loaded))

    def submit(self, identity: Confirmed | None):
        if self.cart.is_empty():
            raise ValidationError("No items selected.")
        if identity is None:
            raise ValidationError("No customer identified.")
        if self.submitting:
            raise ValidationError("The transaction is already being recorded.")
        if self.committed:
            raise ValidationError("Transaction already recorded. Press next customer.")

        self.transaction = Transaction(
            user_id=identity.profile.uid,
            item_id_quantity=self.cart.to_line_items(),
        )
        self.error = ""
        self.status = ""
        self.submitting = True
        payload = self.transaction.to_payload()
        token = self.session.token

        def on_recorded(result: ApiResult):
            self.submitting = False
            if result.ok:
                self.committed = True
                self.status = "Transaction successful!"
                logger.info(f"[Checkout] transaction recorded for uid={payload['user_id']}")
            else:
                self.error = result.error_message("Transaction failed.")
                logger.error(f"[Checkout] transaction failed: {self.error}")

        logger.info(f"[Checkout] submitting {len(payload['item_id_quantity'])} line items")
        self.dispatch(lambda: self.api.record_transaction(token, payload), self._guard(on_recorded))

    def reset(self):
        self._generation += 1
        self._clear()
