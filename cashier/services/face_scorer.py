from __future__ import annotations

from collections import deque

import cv2
import numpy as np

from cashier.core.config import settings
from cashier.core.errors import RecognitionError


class SmileScorer:
    """Haar cascade face + smile detector.

    The score of a frame is the share of the last `window` frames in which the
    largest face was smiling, so a single noisy detection never crosses the
    capture threshold.
    """

    def __init__(self, window: int | None = None):
        self.face_cascade = cv2.CascadeClassifier(cv2.data.haarcascades + "haarcascade_frontalface_default.xml")
        self.smile_cascade = cv2.CascadeClassifier(cv2.data.haarcascades + "haarcascade_smile.xml")
        self.history = deque(maxlen=window or settings.SMILE_WINDOW)

    def reset(self):
        self.history.clear()

    def _largest_face(self, gray: np.ndarray):
        faces = self.face_cascade.detectMultiScale(gray, scaleFactor=1.1, minNeighbors=5, minSize=(80, 80))
        if len(faces) == 0:
            return None
        return max(faces, key=lambda box: box[2] * box[3])

    def score(self, frame: np.ndarray) -> float | None:
        """Positive expression score in [0, 1], or None when there is no face."""
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        box = self._largest_face(gray)
        if box is None:
            self.history.clear()
            return None

        x, y, w, h = box
        # smiles live in the lower half of the face
        mouth = gray[y + h // 2:y + h, x:x + w]
        smiles = self.smile_cascade.detectMultiScale(mouth, scaleFactor=1.7, minNeighbors=20, minSize=(25, 25))
        self.history.append(1.0 if len(smiles) > 0 else 0.0)
        if len(self.history) < self.history.maxlen:
            return 0.0
        return float(sum(self.history) / len(self.history))

    def extract_face(self, frame: np.ndarray) -> bytes:
        """Crop the largest face and encode it as JPEG."""
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY)
        box = self._largest_face(gray)
        if box is None:
            raise RecognitionError("No face detected.")
        x, y, w, h = box
        ok, buf = cv2.imencode(".jpg", frame[y:y + h, x:x + w])
        if not ok:
            raise RecognitionError("Could not encode the face image.")
        return buf.tobytes()
