from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QGridLayout, QPushButton, QLabel, QScrollArea)
from PyQt6.QtCore import Qt
from PyQt6.QtNetwork import QNetworkAccessManager
import logging

from cashier.popup.error_popup import LogoutPopup
from cashier.ui.product_card import ProductCard

COLUMNS = 3


class CatalogueScreen(QWidget):
    def __init__(self, controller):
        super().__init__()
        self.controller = controller
        self.cards = []
        self.shown_inventory = None
        self.network = QNetworkAccessManager(self)
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(20, 20, 20, 20)

        header = QHBoxLayout()
        title = QLabel("Product Catalog")
        title.setStyleSheet("font-size: 28px; font-weight: bold;")
        header.addWidget(title)
        header.addStretch()
        logout_btn = QPushButton("Log out")
        logout_btn.clicked.connect(self.handle_logout)
        header.addWidget(logout_btn)
        layout.addLayout(header)

        self.message_label = QLabel("")
        self.message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.message_label.setStyleSheet("font-size: 18px; color: #718096; padding: 30px;")
        layout.addWidget(self.message_label)

        scroll_area = QScrollArea()
        scroll_area.setWidgetResizable(True)
        scroll_area.setStyleSheet("QScrollArea { border: none; }")
        self.grid_content = QWidget()
        self.grid = QGridLayout(self.grid_content)
        self.grid.setSpacing(16)
        self.grid.setAlignment(Qt.AlignmentFlag.AlignTop | Qt.AlignmentFlag.AlignHCenter)
        scroll_area.setWidget(self.grid_content)
        layout.addWidget(scroll_area, stretch=1)

        self.next_btn = QPushButton("Next Step (0)")
        self.next_btn.setStyleSheet("""
            QPushButton {
                font-size: 20px;
                padding: 12px 40px;
                background-color: #2F855A;
                color: white;
                border: none;
                border-radius: 8px;
            }
            QPushButton:disabled {
                background-color: #A0AEC0;
            }
        """)
        self.next_btn.clicked.connect(self.controller.go_to_identify)
        layout.addWidget(self.next_btn, alignment=Qt.AlignmentFlag.AlignCenter)

        self.setLayout(layout)

    def handle_logout(self):
        popup = LogoutPopup(self)
        popup.exec()
        if popup.result == 'logout':
            self.controller.logout()

    def rebuild_grid(self):
        """Recreate the product cards for a freshly loaded inventory"""
        for card in self.cards:
            card.deleteLater()
        self.cards = []
        for index, item in enumerate(self.controller.inventory):
            card = ProductCard(item, self.controller.cart, self.update_next_button, self.network)
            self.grid.addWidget(card, index // COLUMNS, index % COLUMNS)
            self.cards.append(card)
        self.shown_inventory = self.controller.inventory
        logging.info(f"[Catalogue] showing {len(self.cards)} products")

    def update_next_button(self):
        count = self.controller.cart.total_selected_count()
        self.next_btn.setText(f"Next Step ({count})")
        self.next_btn.setEnabled(self.controller.can_go_to_identify)

    def refresh(self):
        controller = self.controller
        if controller.inventory is not self.shown_inventory:
            self.rebuild_grid()
        else:
            for card in self.cards:
                card.refresh()

        if controller.inventory_loading and not controller.inventory:
            self.message_label.setText("Loading items...")
        elif controller.inventory_error:
            self.message_label.setText(controller.inventory_error)
        elif not controller.inventory:
            self.message_label.setText("Add products via managerial console.")
        else:
            self.message_label.setText("")
        self.message_label.setVisible(bool(self.message_label.text()))
        self.update_next_button()
