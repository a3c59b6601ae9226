from __future__ import annotations

import logging

import cv2

from cashier.core.config import settings
from cashier.core.errors import RecognitionError

logger = logging.getLogger(__name__)


class Camera:
    """cv2.VideoCapture as a context manager; released on every exit path."""

    def __init__(self, index: int):
        self.index = index
        self.cap = None

    def __enter__(self):
        cap = cv2.VideoCapture(self.index)
        if not cap.isOpened():
            cap.release()
            raise RecognitionError("Camera access denied or not available.")
        self.cap = cap
        logger.info(f"[Camera] opened device {self.index}")
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False

    def read(self):
        if self.cap is None:
            return False, None
        return self.cap.read()

    def release(self):
        if self.cap is not None:
            self.cap.release()
            self.cap = None
            logger.info(f"[Camera] released device {self.index}")


def open_camera(index: int | None = None) -> Camera:
    return Camera(settings.CAMERA_INDEX if index is None else index)
