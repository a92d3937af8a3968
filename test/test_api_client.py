import threading

import pytest
import requests

from storefront.api.client import ApiClient, clean_params
from storefront.domain.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    NotFoundError,
)
from storefront.events import AUTH_LOGOUT
from storefront.repositories.token_store import MemoryTokenStore

from conftest import BASE_URL, Call, FakeSession, make_response


def test_clean_params_drops_unset_values_and_encodes_booleans():
    params = {"page": 1, "q": "  ", "category_id": None, "inStock": True, "isBlocked": False, "search": " key "}
    assert clean_params(params) == {"page": 1, "inStock": "true", "isBlocked": "false", "search": "key"}


def test_request_sends_both_tokens_as_bearer_headers(api, fake_session):
    fake_session.add("GET", "/cart", body={"items": [], "total": 0})

    api.get("/cart")

    headers = fake_session.calls[0].headers
    assert headers["Authorization"] == "Bearer access-1"
    assert headers["RefreshToken"] == "Bearer refresh-1"
    assert headers["Accept"] == "application/json"


def test_401_refreshes_once_and_replays_with_new_token(api, fake_session, tokens):
    fake_session.add("GET", "/orders", 401, {"message": "jwt expired"})
    fake_session.add("GET", "/orders", 200, {"items": []})
    fake_session.add("POST", "/auth/refresh", 200, {"accessToken": "access-2"})

    body = api.get("/orders")

    assert body == {"items": []}
    assert tokens.access_token == "access-2"
    assert tokens.refresh_token == "refresh-1"
    replay = fake_session.calls_to("GET", "/orders")[-1]
    assert replay.headers["Authorization"] == "Bearer access-2"
    assert fake_session.calls_to("POST", "/auth/refresh")[0].headers["RefreshToken"] == "Bearer refresh-1"


def test_refresh_failure_clears_tokens_and_emits_logout(api, fake_session, tokens, events):
    seen = []
    events.subscribe(AUTH_LOGOUT, lambda: seen.append("logout"))
    fake_session.add("GET", "/wallet", 401, {"message": "jwt expired"})
    fake_session.add("POST", "/auth/refresh", 401, {"message": "Refresh token failed"})

    with pytest.raises(AuthenticationError, match="Refresh token failed"):
        api.get("/wallet")

    assert seen == ["logout"]
    assert not tokens.has_any()
    assert len(fake_session.calls_to("GET", "/wallet")) == 1


def test_missing_refresh_token_ends_session_without_refresh_call(fake_session, events):
    seen = []
    events.subscribe(AUTH_LOGOUT, lambda: seen.append(1))
    tokens = MemoryTokenStore(access="stale")
    client = ApiClient(BASE_URL, tokens, events, session=fake_session)
    fake_session.add("GET", "/auth/me", 401, {"message": "expired"})

    with pytest.raises(AuthenticationError):
        client.get("/auth/me")

    assert seen == [1]
    assert fake_session.calls_to("POST", "/auth/refresh") == []


def test_second_401_after_refresh_is_not_retried_again(api, fake_session):
    fake_session.add("GET", "/admin/users", 401, {"message": "still no"})
    fake_session.add("POST", "/auth/refresh", 200, {"accessToken": "access-2", "refreshToken": "refresh-2"})

    with pytest.raises(AuthenticationError, match="still no"):
        api.get("/admin/users")

    assert len(fake_session.calls_to("GET", "/admin/users")) == 2
    assert len(fake_session.calls_to("POST", "/auth/refresh")) == 1


@pytest.mark.parametrize(
    "status, error",
    [(403, AuthorizationError), (404, NotFoundError), (400, ApiError), (500, ApiError)],
)
def test_error_statuses_map_to_error_types(api, fake_session, status, error):
    fake_session.add("POST", "/cart/add", status, {"message": "Nope"})

    with pytest.raises(error, match="Nope") as exc_info:
        api.post("/cart/add", json={"productId": "p1", "quantity": 1})

    assert exc_info.value.status == status


def test_error_without_message_uses_fallback(api, fake_session):
    fake_session.add("GET", "/orders/stats", 500, {})

    with pytest.raises(ApiError, match="Failed to fetch order stats"):
        api.get("/orders/stats", fallback_message="Failed to fetch order stats")


def test_error_key_is_used_when_message_missing(api, fake_session):
    fake_session.add("POST", "/vouchers/apply", 400, {"error": "Voucher expired"})

    with pytest.raises(ApiError, match="Voucher expired"):
        api.post("/vouchers/apply", json={"code": "X", "amount": 1})


def test_network_failure_is_wrapped(api, fake_session):
    fake_session.fail("GET", "/products", requests.ConnectionError("refused"))

    with pytest.raises(NetworkError, match="Failed to fetch products"):
        api.get("/products", fallback_message="Failed to fetch products")


def test_empty_success_body_decodes_to_empty_dict(api, fake_session):
    fake_session.add("DELETE", "/admin/faqs/3", 204, None)

    assert api.delete("/admin/faqs/3") == {}


def test_malformed_success_body_raises(api, fake_session):
    fake_session.add("GET", "/cart", 200, "<html>oops</html>")

    with pytest.raises(ApiError, match="Malformed"):
        api.get("/cart")


class SlowRefreshSession(FakeSession):
    """Every request with the old token gets a 401; the refresh call blocks until released."""

    def __init__(self):
        super().__init__()
        self.release = threading.Event()

    def request(self, method, url, **kwargs):
        path = url[len(BASE_URL):]
        self.calls.append(Call(method, path, kwargs))
        if path == "/auth/refresh":
            self.release.wait(5)
            return make_response(200, {"accessToken": "access-2"})
        if (kwargs.get("headers") or {}).get("Authorization") == "Bearer access-2":
            return make_response(200, {"ok": True})
        return make_response(401, {"message": "expired"})


def test_concurrent_401s_share_one_refresh(tokens, events):
    session = SlowRefreshSession()
    client = ApiClient(BASE_URL, tokens, events, session=session)
    results = []

    workers = [threading.Thread(target=lambda: results.append(client.get("/orders"))) for _ in range(3)]
    for w in workers:
        w.start()

    tick = threading.Event()
    for _ in range(500):
        if len(session.calls_to("GET", "/orders")) >= 3:
            break
        tick.wait(0.01)
    session.release.set()
    for w in workers:
        w.join(5)

    assert results == [{"ok": True}] * 3
    assert len(session.calls_to("POST", "/auth/refresh")) == 1
