from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Protocol

log = logging.getLogger(__name__)


class TokenStore(Protocol):
    @property
    def access_token(self) -> Optional[str]: ...
    @property
    def refresh_token(self) -> Optional[str]: ...
    def set_tokens(self, access: Optional[str], refresh: Optional[str] = None) -> None: ...
    def clear(self) -> None: ...
    def has_any(self) -> bool: ...


class MemoryTokenStore:
    """Session tokens held in process memory."""

    def __init__(self, access: Optional[str] = None, refresh: Optional[str] = None):
        self._lock = threading.Lock()
        self._access = access or None
        self._refresh = refresh or None

    @property
    def access_token(self) -> Optional[str]:
        return self._access

    @property
    def refresh_token(self) -> Optional[str]:
        return self._refresh

    def set_tokens(self, access: Optional[str], refresh: Optional[str] = None) -> None:
        """Store ``access``; ``refresh`` only replaces the old one when given."""
        with self._lock:
            if access:
                self._access = access
            if refresh:
                self._refresh = refresh
            self._persist()

    def clear(self) -> None:
        with self._lock:
            self._access = None
            self._refresh = None
            self._persist()

    def has_any(self) -> bool:
        return bool(self._access or self._refresh)

    def _persist(self) -> None:
        return None


class FileTokenStore(MemoryTokenStore):
    """Session tokens persisted to a small JSON file between runs."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        access, refresh = self._load()
        super().__init__(access, refresh)

    def _load(self) -> tuple[Optional[str], Optional[str]]:
        if not self.path.exists():
            return None, None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            log.warning("token_file_unreadable path=%s error=%s", self.path, e)
            return None, None
        if not isinstance(data, dict):
            return None, None
        return data.get("accessToken") or None, data.get("refreshToken") or None

    def _persist(self) -> None:
        if not self._access and not self._refresh:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"accessToken": self._access, "refreshToken": self._refresh}
        self.path.write_text(json.dumps(payload), encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            log.debug("token_file_chmod_unsupported path=%s", self.path)
