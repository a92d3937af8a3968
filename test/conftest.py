import json
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest
import requests

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

BASE_URL = "http://shop.test/api"


def make_response(status: int, body=None) -> requests.Response:
    response = requests.Response()
    response.status_code = status
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode() if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
    return response


@dataclass
class Call:
    method: str
    path: str
    kwargs: dict = field(default_factory=dict)

    @property
    def headers(self) -> dict:
        return self.kwargs.get("headers") or {}

    @property
    def json(self):
        return self.kwargs.get("json")

    @property
    def params(self) -> dict:
        return self.kwargs.get("params") or {}


class FakeSession:
    """Stands in for requests.Session: answers queued per (method, path); the last answer repeats."""

    def __init__(self):
        self.routes: dict[tuple[str, str], list] = {}
        self.calls: list[Call] = []

    def add(self, method: str, path: str, status: int = 200, body=None) -> "FakeSession":
        self.routes.setdefault((method, path), []).append((status, body))
        return self

    def fail(self, method: str, path: str, exc: Exception) -> "FakeSession":
        self.routes.setdefault((method, path), []).append(exc)
        return self

    def calls_to(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method and c.path == path]

    def request(self, method, url, **kwargs):
        path = url[len(BASE_URL):] if url.startswith(BASE_URL) else url
        self.calls.append(Call(method, path, kwargs))
        queue = self.routes.get((method, path))
        if not queue:
            return make_response(404, {"message": f"No route for {method} {path}"})
        answer = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(answer, Exception):
            raise answer
        status, body = answer
        return make_response(status, body)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def tokens():
    from storefront.repositories.token_store import MemoryTokenStore

    return MemoryTokenStore(access="access-1", refresh="refresh-1")


@pytest.fixture
def events():
    from storefront.events import SignalBus

    return SignalBus()


@pytest.fixture
def api(fake_session, tokens, events):
    from storefront.api.client import ApiClient

    return ApiClient(BASE_URL, tokens, events, session=fake_session, timeout=5)
