# tests/test_capture_loop.py
"""Tests for the capture loop state machine."""

from unittest.mock import MagicMock

import cv2
import pytest

from cashier.core.errors import RecognitionError
from cashier.services.capture_loop import CaptureLoop, CaptureState

from conftest import fail, ok

FRAME = object()


class FakeCamera:
    def __init__(self):
        self.released = False
        self.reads = 0

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.released = True
        return False

    def read(self):
        self.reads += 1
        return True, FRAME


class FakeTimer:
    def __init__(self):
        self.running = False
        self.interval = None

    def start(self, interval):
        self.running = True
        self.interval = interval

    def stop(self):
        self.running = False


class Uploads:
    """Collects upload requests; the test answers them."""

    def __init__(self):
        self.pending = []
        self.count = 0

    def __call__(self, jpeg, on_done):
        self.count += 1
        self.pending.append(on_done)

    def answer(self, result):
        self.pending.pop(0)(result)


@pytest.fixture
def camera():
    return FakeCamera()


@pytest.fixture
def scorer():
    scorer = MagicMock()
    scorer.score.return_value = 0.95
    scorer.extract_face.return_value = b"jpeg"
    return scorer


@pytest.fixture
def timer():
    return FakeTimer()


@pytest.fixture
def uploads():
    return Uploads()


@pytest.fixture
def results():
    return []


@pytest.fixture
def loop(camera, scorer, timer, uploads, results):
    return CaptureLoop(lambda: camera, scorer, timer, uploads, results.append,
                       threshold=0.9, interval_ms=200)


def test_open_starts_polling_on_200ms_cadence(loop, timer, scorer):
    assert loop.open()
    assert loop.state is CaptureState.POLLING
    assert timer.running and timer.interval == 200
    scorer.reset.assert_called_once()


def test_camera_failure_is_terminal_for_the_attempt(scorer, timer, uploads, results):
    def broken_camera():
        raise RecognitionError("Camera access denied or not available.")

    loop = CaptureLoop(broken_camera, scorer, timer, uploads, results.append)
    assert loop.open() is False
    assert loop.state is CaptureState.IDLE
    assert loop.error == "Camera access denied or not available."
    assert not timer.running


def test_low_score_keeps_polling(loop, scorer, uploads):
    scorer.score.return_value = 0.5
    loop.open()
    loop.tick()
    assert loop.state is CaptureState.POLLING
    assert uploads.count == 0


def test_score_equal_to_threshold_does_not_capture(loop, scorer, uploads):
    scorer.score.return_value = 0.9
    loop.open()
    loop.tick()
    assert uploads.count == 0


def test_no_face_score_is_ignored(loop, scorer, uploads):
    scorer.score.return_value = None
    loop.open()
    loop.tick()
    assert uploads.count == 0


def test_smile_latches_one_upload_while_in_flight(loop, timer, uploads, camera):
    loop.open()
    loop.tick()
    assert loop.state is CaptureState.CAPTURING
    assert not timer.running

    # overlapping timer beats while the upload has not answered
    for _ in range(5):
        loop.tick()
    assert uploads.count == 1
    assert camera.reads == 1


def test_upload_success_releases_camera_and_forwards_user(loop, uploads, camera, results):
    loop.open()
    loop.tick()
    uploads.answer(ok({"user": {"uid": "u1", "user_name": "bob"}}))

    assert loop.state is CaptureState.SUCCESS
    assert camera.released
    assert results == [{"uid": "u1", "user_name": "bob"}]

    loop.tick()
    assert uploads.count == 1


def test_assumed_new_response_is_forwarded_whole(loop, uploads, results):
    loop.open()
    loop.tick()
    uploads.answer(ok({"assummed_new": True, "uid": "u9"}))
    assert results == [{"assummed_new": True, "uid": "u9"}]


def test_upload_failure_resumes_polling(loop, uploads, timer, camera, results):
    loop.open()
    loop.tick()
    uploads.answer(fail(500, "model offline"))

    assert loop.state is CaptureState.POLLING
    assert loop.error == "model offline"
    assert timer.running
    assert not camera.released
    assert results == []

    loop.tick()
    assert uploads.count == 2


def test_no_face_at_capture_resumes_polling(loop, scorer, uploads, timer):
    scorer.extract_face.side_effect = RecognitionError("No face detected.")
    loop.open()
    loop.tick()
    assert loop.state is CaptureState.POLLING
    assert loop.error == "No face detected."
    assert timer.running
    assert uploads.count == 0


def test_close_releases_camera_and_drops_late_result(loop, uploads, timer, camera, results):
    loop.open()
    loop.tick()
    loop.close()

    assert camera.released
    assert not timer.running
    assert loop.state is CaptureState.IDLE

    uploads.answer(ok({"user": {"uid": "u1"}}))
    assert results == []
    assert loop.state is CaptureState.IDLE


def test_close_releases_camera_even_if_timer_stop_fails(loop, timer, camera):
    loop.open()
    timer.stop = MagicMock(side_effect=RuntimeError("timer gone"))
    with pytest.raises(RuntimeError):
        loop.close()
    assert camera.released


def test_reopen_after_success_is_allowed(loop, uploads):
    loop.open()
    loop.tick()
    uploads.answer(ok({"user": {"uid": "u1"}}))
    assert loop.open()
    assert loop.state is CaptureState.POLLING


def test_open_while_active_is_ignored(loop):
    assert loop.open()
    assert loop.open() is False


@pytest.mark.parametrize("error", [cv2.error("malformed frame"), RecognitionError("device lost")])
def test_frame_error_stops_polling_and_releases_camera(loop, scorer, timer, camera, uploads, error):
    loop.open()
    scorer.score.side_effect = error

    loop.tick()

    assert loop.state is CaptureState.IDLE
    assert loop.error.startswith("Camera error:")
    assert camera.released
    assert not timer.running

    loop.tick()
    assert camera.reads == 1
    assert uploads.count == 0
