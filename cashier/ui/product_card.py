from PyQt6.QtWidgets import (QFrame, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QSpinBox)
from PyQt6.QtGui import QPixmap
from PyQt6.QtCore import Qt, QUrl
from PyQt6.QtNetwork import QNetworkRequest

from cashier.core.config import settings


def format_price(price):
    """Backend prices are in fils"""
    return f"{price / 100:.2f} {settings.PRICE_CURRENCY}"


class ProductCard(QFrame):
    def __init__(self, item, cart, on_quantity_changed, network=None):
        super().__init__()
        self.item = item
        self.cart = cart
        self.on_quantity_changed = on_quantity_changed
        self.network = network
        self.reply = None
        self.init_ui()
        self.load_photo()

    def init_ui(self):
        self.setFixedWidth(300)
        self.setStyleSheet("""
            QFrame {
                background-color: #FFFFFF;
                border: 1px solid #E2E8F0;
                border-radius: 12px;
            }
        """)
        layout = QVBoxLayout(self)
        layout.setSpacing(6)

        self.photo = QLabel("No Photo")
        self.photo.setFixedHeight(150)
        self.photo.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.photo.setStyleSheet("background-color: #EDF2F7; color: #718096; border: none;")
        layout.addWidget(self.photo)

        name = QLabel(self.item.name)
        name.setStyleSheet("font-size: 18px; font-weight: bold; border: none;")
        layout.addWidget(name)

        description = QLabel(self.item.description or "")
        description.setWordWrap(True)
        description.setStyleSheet("color: #4A5568; border: none;")
        layout.addWidget(description)

        price = QLabel(f"Price: {format_price(self.item.price)}")
        price.setStyleSheet("font-weight: bold; border: none;")
        layout.addWidget(price)

        points = QLabel(f"Points: {self.item.percent_point_allocation:g}%")
        points.setStyleSheet("color: #276749; background-color: #C6F6D5; border: none; padding: 2px 6px;")
        layout.addWidget(points, alignment=Qt.AlignmentFlag.AlignLeft)

        row = QHBoxLayout()
        self.minus_btn = QPushButton("-")
        self.minus_btn.clicked.connect(lambda: self.change(self.cart.decrement))
        self.qty_box = QSpinBox()
        self.qty_box.setRange(0, 999)
        self.qty_box.valueChanged.connect(self.on_value_changed)
        self.plus_btn = QPushButton("+")
        self.plus_btn.clicked.connect(lambda: self.change(self.cart.increment))
        self.state_label = QLabel("")
        self.state_label.setStyleSheet("border: none;")
        for w in (self.minus_btn, self.qty_box, self.plus_btn, self.state_label):
            row.addWidget(w)
        layout.addLayout(row)

        self.refresh()

    def load_photo(self):
        if not self.item.photo_url or self.network is None:
            return
        self.reply = self.network.get(QNetworkRequest(QUrl(self.item.photo_url)))
        self.reply.finished.connect(self.on_photo_loaded)

    def on_photo_loaded(self):
        reply, self.reply = self.reply, None
        pixmap = QPixmap()
        if pixmap.loadFromData(reply.readAll()):
            self.photo.setPixmap(pixmap.scaled(
                280, 150, Qt.AspectRatioMode.KeepAspectRatio, Qt.TransformationMode.SmoothTransformation))
        reply.deleteLater()

    def change(self, action):
        action(self.item.iid)
        self.refresh()
        self.on_quantity_changed()

    def on_value_changed(self, value):
        if value == self.cart.get_quantity(self.item.iid):
            return
        self.cart.set_quantity(self.item.iid, value)
        self.refresh()
        self.on_quantity_changed()

    def refresh(self):
        count = self.cart.get_quantity(self.item.iid)
        self.qty_box.blockSignals(True)
        self.qty_box.setValue(count)
        self.qty_box.blockSignals(False)
        self.minus_btn.setEnabled(count > 0)
        self.state_label.setText("Selected" if count > 0 else "Not selected")
