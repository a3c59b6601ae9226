from PyQt6.QtWidgets import (QWidget, QVBoxLayout, QLabel)
from PyQt6.QtGui import QImage, QPixmap
from PyQt6.QtCore import Qt, QTimer
import logging

import cv2

from cashier.core.errors import CashierError
from cashier.popup.error_popup import ErrorPopup
from cashier.services.camera import open_camera
from cashier.services.capture_loop import CaptureLoop, CaptureState
from cashier.services.face_scorer import SmileScorer


class FaceCaptureWidget(QWidget):
    """Live camera preview; uploads one face crop once the customer smiles"""
    def __init__(self, resolver, dispatch, api, session):
        super().__init__()
        self.resolver = resolver
        self.timer = QTimer(self)
        self.timer.timeout.connect(self.on_tick)
        self.loop = CaptureLoop(
            camera_factory=open_camera,
            scorer=SmileScorer(),
            timer=self.timer,
            upload=lambda jpeg, on_done: dispatch(lambda: api.upload_face_image(session.token, jpeg), on_done),
            on_result=self.on_face_result,
            on_change=self.refresh,
        )
        self.init_ui()

    def init_ui(self):
        layout = QVBoxLayout()
        layout.setContentsMargins(0, 0, 0, 0)

        self.video_label = QLabel()
        self.video_label.setFixedSize(480, 360)
        self.video_label.setStyleSheet("background-color: black; border: 2px solid #2F855A;")
        self.video_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(self.video_label)

        self.status_label = QLabel("")
        self.status_label.setStyleSheet("color: #4A5568;")
        layout.addWidget(self.status_label)

        self.error_label = QLabel("")
        self.error_label.setStyleSheet("color: #E53E3E;")
        self.error_label.setWordWrap(True)
        layout.addWidget(self.error_label)

        self.setLayout(layout)

    @property
    def active(self):
        return self.loop.active

    def start(self):
        if not self.loop.open() and self.loop.error:
            ErrorPopup(self.loop.error, "Camera", self).exec()

    def stop(self):
        self.loop.close()
        self.video_label.clear()

    def on_tick(self):
        self.loop.tick()
        if self.loop.last_frame is not None:
            self.show_frame(self.loop.last_frame)

    def show_frame(self, frame):
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        h, w, ch = rgb.shape
        image = QImage(rgb.data, w, h, ch * w, QImage.Format.Format_RGB888)
        self.video_label.setPixmap(QPixmap.fromImage(image).scaled(
            self.video_label.width(), self.video_label.height(), Qt.AspectRatioMode.KeepAspectRatio))

    def on_face_result(self, response):
        try:
            self.resolver.receive_biometric(response)
        except CashierError as e:
            logging.error(f"[FaceCapture] unusable recognition response: {e}")
            self.error_label.setText(str(e))

    def refresh(self):
        state = self.loop.state
        if state is CaptureState.POLLING:
            self.status_label.setText("Ask the customer to smile at the camera.")
        elif state is CaptureState.CAPTURING:
            self.status_label.setText("Recognising...")
        else:
            self.status_label.setText("")
        self.error_label.setText(self.loop.error)

    def hideEvent(self, event):
        """The camera is never left running behind another screen"""
        self.stop()
        super().hideEvent(event)
