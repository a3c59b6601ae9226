# tests/test_cashier_api.py
"""Tests for the backend client, with a fake requests session."""

from unittest.mock import MagicMock

import pytest
import requests
from jose import jwt

from cashier.services.cashier_api import CashierApi, cashier_id_from_token


def _response(status=200, body=None, invalid_json=False):
    response = MagicMock()
    response.status_code = status
    if invalid_json:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = body if body is not None else {}
    return response


@pytest.fixture
def http():
    http = MagicMock(spec=requests.Session)
    http.request.return_value = _response(200, {})
    return http


@pytest.fixture
def client(http):
    return CashierApi(base_url="http://backend/", timeout_s=3, session=http)


def _sent(http):
    args, kwargs = http.request.call_args
    return args[0], args[1], kwargs


def test_login_posts_credentials_without_token(client, http):
    http.request.return_value = _response(200, {"token": "tok"})

    result = client.login("corner-shop", "anna", "pw")

    method, url, kwargs = _sent(http)
    assert (method, url) == ("POST", "http://backend/cashier/login")
    assert kwargs["json"] == {"shop_nickname": "corner-shop", "account_name": "anna", "password": "pw"}
    assert kwargs["headers"] == {}
    assert kwargs["timeout"] == 3
    assert result.ok and result.data["token"] == "tok"


def test_token_travels_in_header(client, http):
    client.fetch_inventory("tok")
    method, url, kwargs = _sent(http)
    assert (method, url) == ("GET", "http://backend/cashier/inventory")
    assert kwargs["headers"] == {"token": "tok"}


def test_username_is_quoted_in_path(client, http):
    client.fetch_user_profile("tok", "a b/c")
    _, url, _ = _sent(http)
    assert url == "http://backend/cashier/get_user_by_user_name/a%20b%2Fc"


def test_transport_error_is_status_zero(client, http):
    http.request.side_effect = requests.exceptions.ConnectionError("refused")
    result = client.fetch_inventory("tok")
    assert result.status == 0
    assert not result.ok
    assert result.error_message("fallback") == "Network error"


def test_non_json_body_becomes_empty(client, http):
    http.request.return_value = _response(502, invalid_json=True)
    result = client.fetch_inventory("tok")
    assert result.status == 502
    assert result.data == {}
    assert result.error_message("Error loading items") == "Error loading items"


def test_list_body_is_wrapped(client, http):
    http.request.return_value = _response(200, [{"iid": "a"}])
    assert client.fetch_inventory("tok").data == {"items": [{"iid": "a"}]}


def test_only_200_is_success(client, http):
    http.request.return_value = _response(201, {"ok": True})
    assert not client.record_transaction("tok", {}).ok


def test_backend_detail_is_kept(client, http):
    http.request.return_value = _response(401, {"detail": "bad credentials"})
    result = client.login("s", "a", "p")
    assert result.error_message("Login failed") == "bad credentials"


def test_reconciliation_payloads(client, http):
    client.merge_users("tok", "new-uid", "old-uid")
    _, url, kwargs = _sent(http)
    assert url.endswith("/cashier/merge_users")
    assert kwargs["json"] == {"old_uid": "new-uid", "new_uid": "old-uid"}

    client.report_confused_user("tok", "r1", "f1")
    _, url, kwargs = _sent(http)
    assert url.endswith("/cashier/confused_users")
    assert kwargs["json"]["recognised_uid"] == "r1"
    assert kwargs["json"]["found_uid"] == "f1"
    assert isinstance(kwargs["json"]["timestamp"], int)


def test_items_details_and_transaction(client, http):
    client.get_items_details("tok", ["a", "b"])
    _, url, kwargs = _sent(http)
    assert url.endswith("/cashier/get_items_details")
    assert kwargs["json"] == {"item_id_list": ["a", "b"]}

    payload = {"user_id": "u", "item_id_quantity": [["a", 2]]}
    client.record_transaction("tok", payload)
    _, url, kwargs = _sent(http)
    assert url.endswith("/cashier/record_transaction")
    assert kwargs["json"] == payload


def test_face_upload_is_named_after_cashier(client, http):
    token = jwt.encode({"entity_id": "shop-7"}, "secret", algorithm="HS256")

    client.upload_face_image(token, b"\xff\xd8jpeg")

    method, url, kwargs = _sent(http)
    assert (method, url) == ("POST", "http://backend/recognise/")
    filename, content, mime = kwargs["files"]["file"]
    assert filename.startswith("face-") and filename.endswith("-shop-7.jpg")
    assert content == b"\xff\xd8jpeg"
    assert mime == "image/jpeg"


@pytest.mark.parametrize("claims, expected", [
    ({"entity_id": "e1", "shop_id": "s1"}, "e1"),
    ({"shop_id": "s1"}, "s1"),
    ({"sub": "x"}, "debug"),
])
def test_cashier_id_from_token(claims, expected):
    token = jwt.encode(claims, "secret", algorithm="HS256")
    assert cashier_id_from_token(token) == expected


def test_cashier_id_from_garbage_token():
    assert cashier_id_from_token("not-a-jwt") == "debug"
