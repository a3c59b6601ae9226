class CashierError(Exception):
    """Base class for errors shown to the operator."""


class ValidationError(CashierError):
    """A local precondition failed; nothing was sent to the backend."""


class RecognitionError(CashierError):
    """Camera or face capture failure. Stays inside the capture loop."""
