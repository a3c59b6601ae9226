import logging
from pathlib import Path

from PyQt6.QtCore import QSettings

from cashier.core.config import settings

TOKEN_KEY = "jwt"


class TokenStore:
    """Keeps the operator token across restarts in a small INI file."""

    def __init__(self, path=None):
        path = Path(path or settings.TOKEN_STORE_PATH).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        self.qsettings = QSettings(str(path), QSettings.Format.IniFormat)

    def load(self) -> str:
        token = self.qsettings.value(TOKEN_KEY, "", type=str)
        return token or ""

    def save(self, token: str):
        self.qsettings.setValue(TOKEN_KEY, token)
        self.qsettings.sync()
        logging.info("[TokenStore] token saved")

    def clear(self):
        self.qsettings.remove(TOKEN_KEY)
        self.qsettings.sync()
        logging.info("[TokenStore] token cleared")
