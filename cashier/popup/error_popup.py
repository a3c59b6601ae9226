from cashier.popup.base_popup import BasePopup


class ErrorPopup(BasePopup):
    """Operator-facing error with a single OK"""
    def __init__(self, message, title="Something went wrong", parent=None):
        super().__init__(title, message, [("OK", "ok", True)], parent)


class LogoutPopup(BasePopup):
    def __init__(self, parent=None):
        super().__init__(
            "Log out",
            "The current cart and customer will be discarded.",
            [("Cancel", "cancel", False), ("Log out", "logout", True)],
            parent,
        )
