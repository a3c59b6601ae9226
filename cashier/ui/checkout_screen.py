from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QPushButton, QLabel, QScrollArea)
from PyQt6.QtCore import Qt
import logging

from cashier.core.errors import CashierError
from cashier.ui.identify_screen import profile_text
from cashier.ui.product_card import format_price


class CheckoutScreen(QWidget):
    def __init__(self, controller):
        super().__init__()
        self.controller = controller
        self.checkout = controller.checkout
        self.shown_items = None
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(20, 20, 20, 20)

        title = QLabel("Checkout")
        title.setStyleSheet("font-size: 28px; font-weight: bold;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        user_heading = QLabel("User")
        user_heading.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(user_heading)
        self.user_label = QLabel("")
        self.user_label.setStyleSheet("padding: 10px; border: 1px solid #CBD5E0; border-radius: 6px;")
        layout.addWidget(self.user_label)

        cart_heading = QLabel("Cart")
        cart_heading.setStyleSheet("font-size: 20px; font-weight: bold;")
        layout.addWidget(cart_heading)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setStyleSheet("QScrollArea { border: none; }")
        self.scroll_content = QWidget()
        self.scroll_layout = QVBoxLayout(self.scroll_content)
        self.scroll_layout.setSpacing(8)
        self.scroll_layout.setAlignment(Qt.AlignmentFlag.AlignTop)
        scroll_area.setWidget(self.scroll_content)
        layout.addWidget(scroll_area, stretch=1)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #E53E3E; font-size: 16px;")
        layout.addWidget(self.error_label)
        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #2F855A; font-size: 16px;")
        layout.addWidget(self.status_label)

        buttons = QHBoxLayout()
        buttons.addStretch()
        back_btn = QPushButton("Back")
        back_btn.clicked.connect(self.controller.back_to_identify)
        self.checkout_btn = QPushButton("Checkout")
        self.checkout_btn.setStyleSheet("""
            QPushButton {
                background-color: #2F855A;
                color: white;
                padding: 10px 30px;
            }
            QPushButton:disabled {
                background-color: #A0AEC0;
            }
        """)
        self.checkout_btn.clicked.connect(self.handle_checkout)
        next_btn = QPushButton("Next Customer")
        next_btn.clicked.connect(self.controller.next_customer)
        for btn in (back_btn, self.checkout_btn, next_btn):
            btn.setMinimumHeight(44)
            buttons.addWidget(btn)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.setLayout(layout)

    def handle_checkout(self):
        self.error_label.setText("")
        try:
            self.controller.submit()
        except CashierError as e:
            self.error_label.setText(str(e))
            return
        self.refresh()

    def update_item_list(self):
        """Rebuild the item rows from the freshly loaded details"""
        for i in reversed(range(self.scroll_layout.count())):
            widget = self.scroll_layout.itemAt(i).widget()
            if widget:
                widget.deleteLater()

        cart = self.controller.cart
        for item in self.checkout.items:
            row = QLabel(
                f"{item.name}\n{item.description or ''}\n"
                f"Price: {format_price(item.price)} | Quantity: {cart.get_quantity(item.iid)}"
            )
            row.setStyleSheet("padding: 10px; border: 1px solid #E2E8F0; border-radius: 6px;")
            self.scroll_layout.addWidget(row)
        self.shown_items = self.checkout.items
        logging.info(f"[Checkout] showing {len(self.checkout.items)} items")

    def refresh(self):
        identity = self.controller.session.identity
        self.user_label.setText(profile_text(identity.profile) if identity else "-")

        if self.checkout.items is not self.shown_items:
            self.update_item_list()
        if self.checkout.loading:
            self.status_label.setText("Loading items...")
        else:
            self.status_label.setText(self.checkout.status)
        self.error_label.setText(self.checkout.error)

        self.checkout_btn.setEnabled(
            not self.checkout.loading
            and not self.checkout.submitting
            and not self.checkout.committed
            and len(self.checkout.items) > 0
        )
