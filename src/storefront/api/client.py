from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

import requests

from storefront.concurrency import SingleFlight
from storefront.domain.errors import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    NotFoundError,
)
from storefront.events import AUTH_LOGOUT, SignalBus

log = logging.getLogger("storefront.api")

REFRESH_PATH = "/auth/refresh"


def clean_params(params: Optional[Mapping[str, Any]]) -> dict[str, Any]:
    """Drop unset query values; booleans go out as ``true``/``false``."""
    out: dict[str, Any] = {}
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        out[key] = value
    return out


def rewind_files(files: Any) -> None:
    """Seek open file parts back to the start so a multipart body can be sent again."""
    if not files:
        return
    parts = files.values() if isinstance(files, Mapping) else (part for _, part in files)
    for part in parts:
        fh = part[1] if isinstance(part, (tuple, list)) and len(part) > 1 else part
        seek = getattr(fh, "seek", None)
        if callable(seek):
            seek(0)


class ApiClient:
    """Shared HTTP client for the marketplace REST API.

    Sends the session tokens on every call, refreshes the access token once
    on a 401 and replays the request. If the session cannot be refreshed the
    tokens are dropped and ``auth:logout`` is emitted.
    """

    def __init__(
        self,
        base_url: str,
        tokens,
        events: SignalBus,
        session: Optional[requests.Session] = None,
        timeout: float = 60.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.tokens = tokens
        self.events = events
        self.session = session or requests.Session()
        self.timeout = timeout
        self._flights = SingleFlight()

    def get(self, path: str, **kwargs) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs) -> Any:
        return self.request("PUT", path, **kwargs)

    def delete(self, path: str, **kwargs) -> Any:
        return self.request("DELETE", path, **kwargs)

    def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        files: Any = None,
        data: Any = None,
        fallback_message: Optional[str] = None,
    ) -> Any:
        sent_with = self.tokens.access_token
        response = self._send(method, path, params, json, files, data, fallback_message)

        if response.status_code == 401 and path != REFRESH_PATH:
            log.info("api_unauthorized method=%s path=%s", method, path)
            self._refresh_after_401(sent_with)
            rewind_files(files)
            response = self._send(method, path, params, json, files, data, fallback_message)

        return self._decode(method, path, response, fallback_message)

    def refresh_session(self) -> str:
        """Exchange the refresh token for a new access token."""
        return self._flights.do("refresh", self._refresh_tokens)

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        access = self.tokens.access_token
        refresh = self.tokens.refresh_token
        if access:
            headers["Authorization"] = f"Bearer {access}"
        if refresh:
            headers["RefreshToken"] = f"Bearer {refresh}"
        return headers

    def _send(self, method, path, params, json, files, data, fallback_message) -> requests.Response:
        try:
            return self.session.request(
                method,
                self._url(path),
                params=clean_params(params),
                json=json,
                files=files,
                data=data,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("api_network_error method=%s path=%s error=%s", method, path, e)
            raise NetworkError(fallback_message or "Network error. No response received.") from e

    def _refresh_after_401(self, sent_with: Optional[str]) -> None:
        current = self.tokens.access_token
        if current and current != sent_with:
            # another caller already refreshed while this request was out
            return
        self.refresh_session()

    def _refresh_tokens(self) -> str:
        refresh = self.tokens.refresh_token
        if not refresh:
            log.warning("session_refresh_skipped reason=no_refresh_token")
            self._end_session()
            raise AuthenticationError("Session expired. Please sign in again.", status=401)

        try:
            response = self.session.request(
                "POST",
                self._url(REFRESH_PATH),
                json={},
                headers={"RefreshToken": f"Bearer {refresh}", "Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("session_refresh_failed error=%s", e)
            self._end_session()
            raise AuthenticationError("Refresh token failed", status=None) from e

        body = self._body(response)
        access = body.get("accessToken") if isinstance(body, dict) else None
        if not response.ok or not access:
            log.warning("session_refresh_failed status=%s", response.status_code)
            self._end_session()
            raise AuthenticationError(
                self._message(body, "Refresh token failed"),
                status=response.status_code,
                payload=body,
            )

        self.tokens.set_tokens(access, body.get("refreshToken"))
        log.info("session_refreshed")
        return access

    def _end_session(self) -> None:
        self.tokens.clear()
        self.events.emit(AUTH_LOGOUT)

    @staticmethod
    def _body(response: requests.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"message": response.text}

    @staticmethod
    def _message(body: Any, fallback: str) -> str:
        if isinstance(body, dict):
            for key in ("message", "error"):
                value = body.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        return fallback

    def _decode(self, method: str, path: str, response: requests.Response, fallback_message: Optional[str]) -> Any:
        status = response.status_code
        if 200 <= status < 300:
            if not response.content:
                return {}
            try:
                return response.json()
            except ValueError as e:
                raise ApiError("Malformed response from server.", status=status) from e

        body = self._body(response)
        message = self._message(body, fallback_message or f"Request failed with status {status}")
        log.warning("api_error method=%s path=%s status=%s message=%s", method, path, status, message)

        if status == 401:
            raise AuthenticationError(message, status=status, payload=body)
        if status == 403:
            raise AuthorizationError(message, status=status, payload=body)
        if status == 404:
            raise NotFoundError(message, status=status, payload=body)
        raise ApiError(message, status=status, payload=body)
