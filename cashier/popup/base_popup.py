from PyQt6.QtWidgets import (QDialog, QVBoxLayout, QHBoxLayout, QLabel, QPushButton)
from PyQt6.QtCore import Qt

PRIMARY = "#2F855A"
SOFT = "#E2E8F0"


class BasePopup(QDialog):
    """Modal message with a row of choice buttons.

    `choices` is a list of (label, result, is_primary); the clicked choice's
    result is left in `self.result` after exec().
    """
    def __init__(self, title, message, choices, parent=None):
        super().__init__(parent)
        self.result = None
        self.setModal(True)
        self.setWindowTitle(title)
        self.setMinimumWidth(420)
        self.setStyleSheet("QDialog { background-color: #FFFFFF; }")

        layout = QVBoxLayout()
        layout.setContentsMargins(30, 30, 30, 30)
        layout.setSpacing(20)

        title_label = QLabel(title)
        title_label.setStyleSheet("color: #1A202C; font-size: 20px; font-weight: bold;")
        title_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title_label)

        message_label = QLabel(message)
        message_label.setStyleSheet("color: #2D3748; font-size: 15px;")
        message_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        message_label.setWordWrap(True)
        layout.addWidget(message_label)

        buttons = QHBoxLayout()
        buttons.setSpacing(20)
        for label, result, is_primary in choices:
            buttons.addWidget(self.create_button(label, result, is_primary))
        layout.addLayout(buttons)
        self.setLayout(layout)

    def create_button(self, text, result, is_primary=False):
        btn = QPushButton(text)
        color, text_color = (PRIMARY, "#FFFFFF") if is_primary else (SOFT, "#1A202C")
        btn.setStyleSheet(
            f"background-color: {color}; color: {text_color}; padding: 10px 24px; border-radius: 8px;"
        )
        btn.clicked.connect(lambda: self.done_with_result(result))
        return btn

    def done_with_result(self, result):
        self.result = result
        self.accept()
