from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import os
import sys

from storefront.domain.errors import ValidationError

DEFAULT_API_BASE_URL = "http://localhost:4000/api"


@dataclass(frozen=True)
class AppPaths:
    base_dir: Path
    session_path: Path
    logs_dir: Path


@dataclass(frozen=True)
class ClientSettings:
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 60.0
    token_check_interval_seconds: float = 300.0
    app_name: str = "Storefront"


def _windows_appdata() -> Path:
    return Path(os.environ.get("APPDATA", str(Path.home() / "AppData" / "Roaming")))


def _mac_app_support() -> Path:
    return Path.home() / "Library" / "Application Support"


def get_app_paths(app_name: str = "Storefront", base: Path | None = None) -> AppPaths:
    if base is None:
        if sys.platform.startswith("win"):
            base = _windows_appdata() / app_name
        elif sys.platform == "darwin":
            base = _mac_app_support() / app_name
        else:
            base = Path.home() / f".{app_name.lower()}"

    logs = base / "logs"
    session = base / "session.json"

    base.mkdir(parents=True, exist_ok=True)
    logs.mkdir(parents=True, exist_ok=True)

    return AppPaths(base_dir=base, session_path=session, logs_dir=logs)


def _positive_float(name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValidationError(f"{name} must be a number. Received: {raw!r}") from exc
    if value <= 0:
        raise ValidationError(f"{name} must be > 0. Received: {value}")
    return value


def load_settings(environ: dict[str, str] | None = None) -> ClientSettings:
    env = os.environ if environ is None else environ
    defaults = ClientSettings()

    url = (env.get("STOREFRONT_API_URL") or defaults.api_base_url).strip().rstrip("/")
    timeout = defaults.timeout_seconds
    interval = defaults.token_check_interval_seconds

    if env.get("STOREFRONT_TIMEOUT"):
        timeout = _positive_float("STOREFRONT_TIMEOUT", env["STOREFRONT_TIMEOUT"])
    if env.get("STOREFRONT_TOKEN_CHECK_INTERVAL"):
        interval = _positive_float("STOREFRONT_TOKEN_CHECK_INTERVAL", env["STOREFRONT_TOKEN_CHECK_INTERVAL"])

    return ClientSettings(
        api_base_url=url,
        timeout_seconds=timeout,
        token_check_interval_seconds=interval,
        app_name=env.get("STOREFRONT_APP_NAME", defaults.app_name),
    )
