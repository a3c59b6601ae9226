from __future__ import annotations

import logging
import time
from typing import Any, Callable, NamedTuple
from urllib.parse import quote

import requests
from jose import JWTError, jwt

from cashier.core.config import settings

logger = logging.getLogger(__name__)

TRANSPORT_ERROR_STATUS = 0


class ApiResult(NamedTuple):
    """Uniform (status, data) shape returned by every backend call."""
    status: int
    data: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status == 200

    def error_message(self, fallback: str) -> str:
        detail = self.data.get("detail") if isinstance(self.data, dict) else None
        return str(detail) if detail else fallback


# (call, on_done): runs `call` off the UI thread and hands its result to `on_done` on it
Dispatcher = Callable[[Callable[[], "ApiResult"], Callable[["ApiResult"], None]], None]


def cashier_id_from_token(token: str) -> str:
    """entity_id or shop_id claim of the token. The signature is the backend's business."""
    try:
        claims = jwt.get_unverified_claims(token)
    except JWTError:
        return "debug"
    return str(claims.get("entity_id") or claims.get("shop_id") or "debug")


class CashierApi:
    """Client for the cashier backend.

    - Every method returns an ApiResult and never raises for HTTP or
      network failures; only status 200 counts as success.
    - The operator token travels in a `token` header.
    """
    def __init__(self, base_url: str | None = None, timeout_s: float | None = None,
                 session: requests.Session | None = None) -> None:
        self.base = (base_url or settings.API_URL).rstrip("/")
        self.timeout_s = timeout_s if timeout_s is not None else settings.REQUEST_TIMEOUT_S
        self.http = session or requests.Session()

    def _headers(self, token: str | None) -> dict[str, str]:
        return {"token": token} if token else {}

    def _request(self, method: str, path: str, token: str | None = None, *,
                 timeout_s: float | None = None, **kwargs) -> ApiResult:
        url = f"{self.base}{path}"
        try:
            response = self.http.request(
                method,
                url,
                headers=self._headers(token),
                timeout=timeout_s or self.timeout_s,
                **kwargs,
            )
        except requests.exceptions.RequestException as e:
            logger.warning(f"[API] {method} {path} failed without response: {e}")
            return ApiResult(TRANSPORT_ERROR_STATUS, {"detail": "Network error"})

        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"items": data} if isinstance(data, list) else {}

        if response.status_code != 200:
            logger.info(f"[API] {method} {path} -> {response.status_code}")
        return ApiResult(response.status_code, data)

    def login(self, shop_nickname: str, account_name: str, password: str) -> ApiResult:
        payload = {
            "shop_nickname": shop_nickname,
            "account_name": account_name,
            "password": password,
        }
        return self._request("POST", "/cashier/login", json=payload)

    def fetch_inventory(self, token: str) -> ApiResult:
        return self._request("GET", "/cashier/inventory", token)

    def fetch_user_profile(self, token: str, username: str) -> ApiResult:
        path = f"/cashier/get_user_by_user_name/{quote(username, safe='')}"
        return self._request("GET", path, token)

    def upload_face_image(self, token: str, jpeg_bytes: bytes) -> ApiResult:
        timestamp = int(time.time() * 1000)
        filename = f"face-{timestamp}-{cashier_id_from_token(token)}.jpg"
        files = {"file": (filename, jpeg_bytes, "image/jpeg")}
        return self._request("POST", "/recognise/", token,
                             timeout_s=settings.UPLOAD_TIMEOUT_S, files=files)

    def merge_users(self, token: str, old_uid: str, new_uid: str) -> ApiResult:
        payload = {"old_uid": old_uid, "new_uid": new_uid}
        return self._request("POST", "/cashier/merge_users", token, json=payload)

    def report_confused_user(self, token: str, recognised_uid: str, found_uid: str) -> ApiResult:
        payload = {
            "recognised_uid": recognised_uid,
            "found_uid": found_uid,
            "timestamp": int(time.time() * 1000),
        }
        return self._request("POST", "/cashier/confused_users", token, json=payload)

    def get_items_details(self, token: str, item_ids: list[str]) -> ApiResult:
        return self._request("POST", "/cashier/get_items_details", token,
                             json={"item_id_list": item_ids})

    def record_transaction(self, token: str, payload: dict[str, Any]) -> ApiResult:
        return self._request("POST", "/cashier/record_transaction", token, json=payload)
