from __future__ import annotations

import enum
import logging
from contextlib import ExitStack
from typing import Callable

import cv2

from cashier.core.config import settings
from cashier.core.errors import RecognitionError
from cashier.services.cashier_api import ApiResult

logger = logging.getLogger(__name__)


class CaptureState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"
    CAPTURING = "capturing"
    SUCCESS = "success"


class CaptureLoop:
    """Polls the camera until the customer smiles, then uploads one face crop.

    IDLE -> POLLING -> CAPTURING -> SUCCESS, or back to POLLING when the crop
    or the upload fails. `tick()` is driven by `timer` (a QTimer in the app);
    ticks that arrive while an upload is in flight are dropped. The camera is
    held in an ExitStack and released by `close()` or on success, whatever
    state the loop is in.
    """

    def __init__(self, camera_factory, scorer, timer,
                 upload: Callable[[bytes, Callable[[ApiResult], None]], None],
                 on_result: Callable[[dict], None],
                 on_change: Callable[[], None] | None = None,
                 threshold: float | None = None,
                 interval_ms: int | None = None):
        self.camera_factory = camera_factory
        self.scorer = scorer
        self.timer = timer
        self.upload = upload
        self.on_result = on_result
        self.on_change = on_change or (lambda: None)
        self.threshold = settings.SMILE_THRESHOLD if threshold is None else threshold
        self.interval_ms = interval_ms or settings.CAPTURE_INTERVAL_MS

        self.state = CaptureState.IDLE
        self.error = ""
        self.last_frame = None
        self.last_score = None
        self._stack: ExitStack | None = None
        self._camera = None
        self._generation = 0

    @property
    def active(self) -> bool:
        return self.state in (CaptureState.POLLING, CaptureState.CAPTURING)

    def open(self) -> bool:
        """Acquire the camera and start polling. A failure here is not retried."""
        if self.active:
            return False
        self.error = ""
        stack = ExitStack()
        try:
            self._camera = stack.enter_context(self.camera_factory())
        except RecognitionError as e:
            stack.close()
            self._camera = None
            self.state = CaptureState.IDLE
            self.error = str(e)
            logger.warning(f"[Capture] camera unavailable: {e}")
            self.on_change()
            return False

        self._stack = stack
        self._generation += 1
        self.scorer.reset()
        self.state = CaptureState.POLLING
        self.timer.start(self.interval_ms)
        logger.info("[Capture] polling started")
        self.on_change()
        return True

    def tick(self):
        """One timer beat: sample a frame and latch into a capture above the threshold."""
        if self.state is not CaptureState.POLLING:
            return
        try:
            ok, frame = self._camera.read()
            if not ok or frame is None:
                return
            score = self.scorer.score(frame)
        except (cv2.error, RecognitionError) as e:
            # ends the attempt; reopen to retry
            logger.error(f"[Capture] frame could not be read: {e}")
            self.error = f"Camera error: {e}"
            self.close()
            return
        self.last_frame = frame
        self.last_score = score
        if self.last_score is not None and self.last_score > self.threshold:
            self._capture(frame)

    def _capture(self, frame):
        self.state = CaptureState.CAPTURING
        self.timer.stop()
        try:
            jpeg = self.scorer.extract_face(frame)
        except RecognitionError as e:
            self.error = str(e)
            logger.info(f"[Capture] {e} Resuming")
            self._resume()
            return

        generation = self._generation

        def on_done(result: ApiResult):
            if generation != self._generation or self.state is not CaptureState.CAPTURING:
                logger.info("[Capture] dropping upload result of a closed capture")
                return
            self._on_uploaded(result)

        logger.info(f"[Capture] uploading face ({len(jpeg)} bytes)")
        self.on_change()
        self.upload(jpeg, on_done)

    def _on_uploaded(self, result: ApiResult):
        data = result.data if result.ok else {}
        response = data if data.get("assummed_new") else (data.get("user") or {})
        if not result.ok or not response.get("uid"):
            self.error = result.error_message("Face recognition failed.")
            logger.warning(f"[Capture] recognition failed ({result.status}): {self.error}")
            self._resume()
            return

        self.state = CaptureState.SUCCESS
        self.error = ""
        self._release()
        logger.info(f"[Capture] recognised uid={response.get('uid')}")
        self.on_change()
        self.on_result(response)

    def _resume(self):
        self.state = CaptureState.POLLING
        self.scorer.reset()
        self.timer.start(self.interval_ms)
        self.on_change()

    def close(self):
        """Stop polling and release the camera. Late upload results are ignored."""
        self._generation += 1
        try:
            self.timer.stop()
        finally:
            self._release()
        if self.state is not CaptureState.SUCCESS:
            self.state = CaptureState.IDLE
        self.on_change()

    def _release(self):
        stack, self._stack, self._camera = self._stack, None, None
        if stack is not None:
            stack.close()
