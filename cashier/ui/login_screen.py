from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QLabel, QLineEdit, QPushButton)
from PyQt6.QtCore import Qt

from cashier.core.errors import CashierError


class LoginScreen(QWidget):
    def __init__(self, controller):
        super().__init__()
        self.controller = controller
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)
        layout.addStretch()

        form = QWidget()
        form.setFixedWidth(420)
        form_layout = QVBoxLayout(form)
        form_layout.setSpacing(14)

        title = QLabel("Cashier Login")
        title.setStyleSheet("font-size: 28px; font-weight: bold;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        form_layout.addWidget(title)

        self.shop_input = QLineEdit()
        self.shop_input.setPlaceholderText("Shop nickname")
        self.account_input = QLineEdit()
        self.account_input.setPlaceholderText("Account name")
        self.password_input = QLineEdit()
        self.password_input.setPlaceholderText("Password")
        self.password_input.setEchoMode(QLineEdit.EchoMode.Password)
        self.password_input.returnPressed.connect(self.handle_login)
        for field in (self.shop_input, self.account_input, self.password_input):
            field.setStyleSheet("font-size: 16px; padding: 8px;")
            form_layout.addWidget(field)

        self.login_btn = QPushButton("Log In")
        self.login_btn.setStyleSheet("""
            QPushButton {
                font-size: 18px;
                padding: 10px;
                background-color: #2F855A;
                color: white;
                border: none;
                border-radius: 8px;
            }
            QPushButton:disabled {
                background-color: #A0AEC0;
            }
        """)
        self.login_btn.clicked.connect(self.handle_login)
        form_layout.addWidget(self.login_btn)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #E53E3E; font-size: 14px;")
        self.error_label.setWordWrap(True)
        form_layout.addWidget(self.error_label)

        layout.addWidget(form, alignment=Qt.AlignmentFlag.AlignCenter)
        layout.addStretch()
        self.setLayout(layout)

    def handle_login(self):
        self.error_label.setText("")
        try:
            self.controller.login(
                self.shop_input.text(),
                self.account_input.text(),
                self.password_input.text(),
            )
        except CashierError as e:
            self.error_label.setText(str(e))
            return
        self.login_btn.setEnabled(False)

    def refresh(self):
        self.login_btn.setEnabled(not self.controller.logging_in)
        self.error_label.setText(self.controller.login_error)
        if self.controller.is_logged_in:
            self.password_input.clear()
