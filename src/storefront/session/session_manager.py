from __future__ import annotations

from enum import Enum
import logging
import threading
from typing import Optional

from storefront.concurrency import IntervalTimer, SingleFlight
from storefront.domain.errors import AppError, ValidationError
from storefront.domain.models import CurrentUser
from storefront.events import AUTH_LOGOUT, SignalBus

log = logging.getLogger(__name__)

CURRENT_USER = "current_user"
DEFAULT_CHECK_INTERVAL = 5 * 60


class SessionState(str, Enum):
    INIT = "init"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    DISPOSED = "disposed"


class SessionManager:
    """Tracks who is signed in for the lifetime of one client.

    ``start()`` loads the current user when a session token exists,
    listens for ``auth:logout`` from the API client and periodically drops
    the user once both tokens are gone. Concurrent loads of the current
    user share one request. ``logout()`` resets everything so a later
    ``start()`` loads again; ``dispose()`` ends the lifecycle.
    """

    def __init__(
        self,
        users,
        tokens,
        events: SignalBus,
        auth=None,
        check_interval: Optional[float] = DEFAULT_CHECK_INTERVAL,
    ):
        self.users = users
        self.tokens = tokens
        self.events = events
        self.auth = auth
        self.check_interval = check_interval

        self._lock = threading.RLock()
        self._flights = SingleFlight()
        self._timer: Optional[IntervalTimer] = None
        self._user: Optional[CurrentUser] = None
        self._loading = True
        self._state = SessionState.INIT
        self._initialized = False
        # bumped by logout(); a fetch started under an older value is discarded
        self._generation = 0

    @property
    def user(self) -> Optional[CurrentUser]:
        return self._user

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def state(self) -> SessionState:
        return self._state

    def __enter__(self) -> "SessionManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    def start(self) -> Optional[CurrentUser]:
        with self._lock:
            if self._state is SessionState.DISPOSED:
                raise AppError("Session manager has been disposed.")
            if self._initialized:
                return self._user
            self._initialized = True
            self.events.subscribe(AUTH_LOGOUT, self._on_logout_signal)
            if self.check_interval and self._timer is None:
                self._timer = IntervalTimer(self.check_interval, self.check_tokens, name="session-token-check")
                self._timer.start()

        self.check_tokens()
        return self.fetch_current_user()

    def fetch_current_user(self) -> Optional[CurrentUser]:
        if not self.tokens.access_token:
            with self._lock:
                self._loading = False
                if self._user is None and self._state is not SessionState.DISPOSED:
                    self._state = SessionState.UNAUTHENTICATED
                return self._user
        return self._flights.do(CURRENT_USER, self._load_user)

    def refresh_user(self) -> Optional[CurrentUser]:
        if not self.tokens.access_token:
            return self._user
        return self.fetch_current_user()

    def _load_user(self) -> Optional[CurrentUser]:
        with self._lock:
            generation = self._generation
            self._loading = True
            self._state = SessionState.LOADING

        try:
            user = self.users.get_current_user()
        except AppError as e:
            log.warning("current_user_fetch_failed error=%s", e)
            self.tokens.clear()
            with self._lock:
                if generation == self._generation:
                    self._user = None
                    self._loading = False
                    if self._state is not SessionState.DISPOSED:
                        self._state = SessionState.UNAUTHENTICATED
            return None

        with self._lock:
            if generation != self._generation or self._state is SessionState.DISPOSED:
                log.info("current_user_discarded reason=session_reset")
                return None
            if user is None:
                # tokens are kept; only the user is unknown
                self._user = None
                self._loading = False
                self._state = SessionState.UNAUTHENTICATED
                log.info("current_user_missing")
                return None
            self._user = user
            self._loading = False
            self._state = SessionState.AUTHENTICATED
        log.info("current_user_loaded user_id=%s role=%s", user.id, user.role)
        return user

    def login(self, user: CurrentUser) -> None:
        with self._lock:
            self._user = user
            self._loading = False
            self._state = SessionState.AUTHENTICATED

    def sign_in(self, email: str, password: str) -> Optional[CurrentUser]:
        if self.auth is None:
            raise ValidationError("Sign-in needs an auth service.")
        result = self.auth.login(email, password)
        if result.user is not None:
            self.login(result.user)
            return result.user
        return self.fetch_current_user()

    def sign_out(self) -> None:
        if self.auth is not None:
            self.auth.logout()
        self.logout()

    def logout(self) -> None:
        with self._lock:
            self._generation += 1
            self._user = None
            self._loading = False
            self._initialized = False
            if self._state is not SessionState.DISPOSED:
                self._state = SessionState.UNAUTHENTICATED
        self._flights.forget(CURRENT_USER)
        self.tokens.clear()
        log.info("session_logged_out")

    def check_tokens(self) -> None:
        if self._user is not None and not self.tokens.has_any():
            log.info("session_tokens_missing action=logout")
            self.logout()

    def _on_logout_signal(self) -> None:
        log.info("session_logout_signal")
        self.logout()

    def dispose(self) -> None:
        with self._lock:
            timer, self._timer = self._timer, None
            self._state = SessionState.DISPOSED
            self._initialized = False
        if timer is not None:
            timer.stop()
        self.events.unsubscribe(AUTH_LOGOUT, self._on_logout_signal)
