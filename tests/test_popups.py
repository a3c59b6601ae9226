# tests/test_popups.py
import os

import pytest
from PyQt6.QtWidgets import QApplication, QPushButton

from cashier.popup.error_popup import ErrorPopup, LogoutPopup

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="module")
def qapp():
    return QApplication.instance() or QApplication([])


def _buttons(popup):
    return {btn.text(): btn for btn in popup.findChildren(QPushButton)}


@pytest.mark.parametrize("label, result", [("Cancel", "cancel"), ("Log out", "logout")])
def test_logout_popup_reports_choice(qapp, label, result):
    popup = LogoutPopup()
    assert set(_buttons(popup)) == {"Cancel", "Log out"}

    _buttons(popup)[label].click()

    assert popup.result == result


def test_error_popup_has_single_ok(qapp):
    popup = ErrorPopup("Camera access denied or not available.", "Camera")
    assert popup.windowTitle() == "Camera"
    buttons = _buttons(popup)
    assert list(buttons) == ["OK"]
    buttons["OK"].click()
    assert popup.result == "ok"
