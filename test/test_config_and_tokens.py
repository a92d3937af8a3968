import json
import logging
from pathlib import Path

import pytest

from storefront.application.container import build_container
from storefront.config import ClientSettings, get_app_paths, load_settings
from storefront.domain.errors import ValidationError
from storefront.events import AUTH_LOGOUT, SignalBus
from storefront.logging_config import setup_logging
from storefront.repositories.token_store import FileTokenStore, MemoryTokenStore

from conftest import BASE_URL, FakeSession


def test_settings_defaults():
    settings = load_settings({})

    assert settings.api_base_url == "http://localhost:4000/api"
    assert settings.timeout_seconds == 60.0
    assert settings.token_check_interval_seconds == 300.0


def test_settings_read_environment():
    settings = load_settings(
        {
            "STOREFRONT_API_URL": "https://shop.example.com/api/",
            "STOREFRONT_TIMEOUT": "15",
            "STOREFRONT_TOKEN_CHECK_INTERVAL": "30",
        }
    )

    assert settings.api_base_url == "https://shop.example.com/api"
    assert settings.timeout_seconds == 15.0
    assert settings.token_check_interval_seconds == 30.0


@pytest.mark.parametrize("raw", ["0", "-5", "soon"])
def test_settings_reject_bad_numbers(raw):
    with pytest.raises(ValidationError, match="STOREFRONT_TIMEOUT"):
        load_settings({"STOREFRONT_TIMEOUT": raw})


def test_app_paths_are_created(tmp_path: Path):
    paths = get_app_paths(base=tmp_path / "app")

    assert paths.logs_dir.is_dir()
    assert paths.session_path == tmp_path / "app" / "session.json"


def test_memory_store_keeps_refresh_token_when_only_access_is_renewed():
    store = MemoryTokenStore(access="a", refresh="r")

    store.set_tokens("a2")

    assert (store.access_token, store.refresh_token) == ("a2", "r")
    store.set_tokens(None)
    assert (store.access_token, store.refresh_token) == ("a2", "r")
    store.clear()
    assert not store.has_any()


def test_file_store_persists_between_instances(tmp_path: Path):
    path = tmp_path / "session.json"
    FileTokenStore(path).set_tokens("a", "r")

    assert json.loads(path.read_text(encoding="utf-8")) == {"accessToken": "a", "refreshToken": "r"}
    reloaded = FileTokenStore(path)
    assert (reloaded.access_token, reloaded.refresh_token) == ("a", "r")

    reloaded.clear()
    assert not path.exists()


def test_file_store_ignores_corrupt_file(tmp_path: Path):
    path = tmp_path / "session.json"
    path.write_text("{not json", encoding="utf-8")

    assert not FileTokenStore(path).has_any()


def test_signal_bus_delivers_to_each_listener_once():
    bus = SignalBus()
    seen = []
    listener = lambda: seen.append(1)  # noqa: E731
    bus.subscribe(AUTH_LOGOUT, listener)
    bus.subscribe(AUTH_LOGOUT, listener)

    bus.emit(AUTH_LOGOUT)
    bus.unsubscribe(AUTH_LOGOUT, listener)
    bus.emit(AUTH_LOGOUT)

    assert seen == [1]


def test_setup_logging_writes_json_lines(tmp_path: Path):
    root = logging.getLogger()
    saved = root.handlers[:]
    root.handlers = []
    try:
        setup_logging(tmp_path)
        logging.getLogger("storefront.checkout").info("checkout_paid order_id=%s", "o1")
        for h in root.handlers + logging.getLogger("storefront.checkout").handlers:
            h.flush()

        line = (tmp_path / "checkout.log").read_text(encoding="utf-8").strip().splitlines()[-1]
        record = json.loads(line)
        assert record["logger"] == "storefront.checkout"
        assert record["message"] == "checkout_paid order_id=o1"
        assert (tmp_path / "app.log").exists()
    finally:
        for name in ("storefront.api", "storefront.checkout"):
            for h in logging.getLogger(name).handlers[:]:
                logging.getLogger(name).removeHandler(h)
                h.close()
        for h in root.handlers[:]:
            root.removeHandler(h)
            h.close()
        root.handlers = saved


def test_container_wires_session_to_client_logout(fake_session):
    settings = ClientSettings(api_base_url=BASE_URL, token_check_interval_seconds=300)
    tokens = MemoryTokenStore(access="a", refresh="r")
    fake_session.add("GET", "/auth/me", 200, {"user": {"id": "u1", "name": "Lan", "email": "lan@example.com"}})

    app = build_container(settings, tokens=tokens, session=fake_session)
    try:
        app.session.start()
        assert app.session.is_authenticated

        app.events.emit(AUTH_LOGOUT)
        assert app.session.user is None
        assert not tokens.has_any()
    finally:
        app.session.dispose()

    flow = app.checkout_flow()
    assert flow.orders is app.orders
    assert isinstance(app.api.session, FakeSession)
