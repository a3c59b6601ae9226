from io import BytesIO

from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QHBoxLayout, QLabel, QLineEdit, QPushButton, QFrame)
from PyQt6.QtGui import QPixmap
from PyQt6.QtCore import Qt
import logging
import qrcode

from cashier.core.errors import CashierError
from cashier.model.identity import BiometricMatch, ManualMatch, MergeType
from cashier.ui.face_capture_widget import FaceCaptureWidget


def profile_text(profile):
    return (f"UID: {profile.uid}\n"
            f"First Name: {profile.first_name or '-'}\n"
            f"Username: {profile.user_name or '-'}")


def qr_pixmap(url, size=180):
    buffer = BytesIO()
    qrcode.make(url).save(buffer)
    pixmap = QPixmap()
    pixmap.loadFromData(buffer.getvalue())
    return pixmap.scaled(size, size, Qt.AspectRatioMode.KeepAspectRatio)


class IdentifyScreen(QWidget):
    def __init__(self, controller, dispatch):
        super().__init__()
        self.controller = controller
        self.resolver = controller.resolver
        self.face_capture = FaceCaptureWidget(self.resolver, dispatch, controller.api, controller.session)
        self.qr_url = None
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(20, 20, 20, 20)

        title = QLabel("Identify User")
        title.setStyleSheet("font-size: 28px; font-weight: bold;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        columns = QHBoxLayout()
        columns.setSpacing(40)
        columns.addLayout(self.build_face_column(), stretch=1)
        columns.addLayout(self.build_search_column(), stretch=1)
        layout.addLayout(columns, stretch=1)

        buttons = QHBoxLayout()
        buttons.addStretch()
        back_btn = QPushButton("Back")
        back_btn.clicked.connect(self.controller.back_to_catalogue)
        self.continue_btn = QPushButton("Continue")
        self.continue_btn.setStyleSheet("background-color: #2F855A; color: white; padding: 10px 30px;")
        self.continue_btn.clicked.connect(self.handle_continue)
        reset_btn = QPushButton("Reset")
        reset_btn.clicked.connect(self.handle_reset)
        for btn in (back_btn, self.continue_btn, reset_btn):
            btn.setMinimumHeight(44)
            buttons.addWidget(btn)
        buttons.addStretch()
        layout.addLayout(buttons)

        self.setLayout(layout)

    def build_face_column(self):
        column = QVBoxLayout()
        heading = QLabel("Face Recognition")
        heading.setStyleSheet("font-size: 20px; font-weight: bold;")
        column.addWidget(heading)

        self.toggle_btn = QPushButton("Use Face Recognition")
        self.toggle_btn.clicked.connect(self.toggle_face_recognition)
        column.addWidget(self.toggle_btn)

        self.face_capture.setVisible(False)
        column.addWidget(self.face_capture)

        self.recognised_box = self.make_profile_box()
        column.addWidget(self.recognised_box)

        self.new_user_label = QLabel("New user detected. You can search and merge manually.")
        self.new_user_label.setStyleSheet("color: #DD6B20; font-weight: bold;")
        self.new_user_label.setWordWrap(True)
        column.addWidget(self.new_user_label)

        self.qr_label = QLabel()
        column.addWidget(self.qr_label)

        self.incorrect_btn = QPushButton("Recognition incorrect, search manually")
        self.incorrect_btn.setStyleSheet("color: #C53030; border: 1px solid #C53030; padding: 6px;")
        self.incorrect_btn.clicked.connect(lambda: self.run(self.resolver.request_correction))
        column.addWidget(self.incorrect_btn)

        column.addStretch()
        return column

    def build_search_column(self):
        column = QVBoxLayout()
        heading = QLabel("Manual Search")
        heading.setStyleSheet("font-size: 20px; font-weight: bold;")
        column.addWidget(heading)

        self.username_input = QLineEdit()
        self.username_input.setPlaceholderText("Enter username")
        self.username_input.returnPressed.connect(self.handle_search)
        column.addWidget(self.username_input)

        self.search_btn = QPushButton("Find User")
        self.search_btn.clicked.connect(self.handle_search)
        column.addWidget(self.search_btn)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #E53E3E;")
        self.error_label.setWordWrap(True)
        column.addWidget(self.error_label)

        self.found_box = self.make_profile_box()
        column.addWidget(self.found_box)

        self.reconcile_btn = QPushButton("")
        self.reconcile_btn.clicked.connect(self.handle_reconcile)
        column.addWidget(self.reconcile_btn)

        self.merge_status_label = QLabel("")
        self.merge_status_label.setStyleSheet("color: #2F855A;")
        column.addWidget(self.merge_status_label)

        self.merge_error_label = QLabel("")
        self.merge_error_label.setStyleSheet("color: #E53E3E;")
        self.merge_error_label.setWordWrap(True)
        column.addWidget(self.merge_error_label)

        column.addStretch()
        return column

    def make_profile_box(self):
        box = QLabel("")
        box.setFrameShape(QFrame.Shape.StyledPanel)
        box.setStyleSheet("padding: 10px; border: 1px solid #CBD5E0; border-radius: 6px;")
        return box

    def run(self, action, *args):
        """Run a resolver action, showing local validation errors inline"""
        self.error_label.setText("")
        try:
            action(*args)
        except CashierError as e:
            self.error_label.setText(str(e))
        self.refresh()

    def toggle_face_recognition(self):
        if self.face_capture.active:
            self.face_capture.stop()
            self.face_capture.setVisible(False)
        else:
            self.face_capture.setVisible(True)
            self.face_capture.start()
        self.refresh()

    def handle_search(self):
        self.run(self.resolver.search, self.username_input.text())

    def handle_reconcile(self):
        merge_type = self.resolver.pending_merge_type
        if merge_type is not None:
            self.run(self.resolver.reconcile, merge_type)

    def handle_continue(self):
        try:
            self.controller.continue_to_checkout()
        except CashierError as e:
            self.error_label.setText(str(e))

    def handle_reset(self):
        self.face_capture.stop()
        self.face_capture.setVisible(False)
        self.username_input.clear()
        self.error_label.setText("")
        self.resolver.reset()
        logging.info("[Identify] reset by operator")

    def refresh(self):
        resolver = self.resolver
        recognised = resolver.biometric if isinstance(resolver.biometric, BiometricMatch) else None
        found = resolver.manual if isinstance(resolver.manual, ManualMatch) else None

        if recognised and self.face_capture.isVisible():
            # a match was received, the camera is no longer needed
            self.face_capture.stop()
            self.face_capture.setVisible(False)
        self.toggle_btn.setVisible(recognised is None)
        self.toggle_btn.setText("Cancel Face Recognition" if self.face_capture.active else "Use Face Recognition")

        self.recognised_box.setVisible(recognised is not None)
        if recognised:
            self.recognised_box.setText(profile_text(recognised.profile))
        self.new_user_label.setVisible(resolver.is_new)
        url = resolver.enrollment_url
        if url != self.qr_url:
            self.qr_url = url
            if url:
                self.qr_label.setPixmap(qr_pixmap(url))
            else:
                self.qr_label.clear()
        self.qr_label.setVisible(url is not None)
        self.incorrect_btn.setVisible(recognised is not None and not resolver.is_new)

        if recognised and resolver.is_new:
            self.search_btn.setText("Find User to Merge")
        elif recognised and resolver.force_correction:
            self.search_btn.setText("Choose another user")
        else:
            self.search_btn.setText("Find User")
        self.search_btn.setEnabled(not resolver.searching)

        if resolver.error:
            self.error_label.setText(resolver.error)
        self.found_box.setVisible(found is not None)
        if found:
            self.found_box.setText(profile_text(found.profile))

        merge_type = resolver.pending_merge_type
        self.reconcile_btn.setVisible(merge_type is not None)
        self.reconcile_btn.setText("Merge New User" if merge_type is MergeType.MERGE else "Correct Recognition")
        self.reconcile_btn.setEnabled(not resolver.merging)
        self.merge_status_label.setText(resolver.merge_status)
        self.merge_error_label.setText(resolver.merge_error)

        self.continue_btn.setVisible(resolver.has_candidate)
        self.continue_btn.setEnabled(not resolver.merging)
