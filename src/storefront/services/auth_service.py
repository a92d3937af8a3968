from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from storefront.domain.errors import ApiError, ValidationError
from storefront.domain.models import ActionResult, LoginResult
from storefront.domain.normalize import current_user_from_api, to_bool, to_str

log = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 6


def _require_email(email: str) -> str:
    cleaned = (email or "").strip()
    if not _EMAIL_RE.match(cleaned):
        raise ValidationError("A valid email is required.")
    return cleaned


def _result(body: dict) -> ActionResult:
    return ActionResult(success=to_bool(body.get("success"), True), message=to_str(body.get("message")))


class AuthService:
    def __init__(self, api, policy: PasswordPolicy | None = None):
        self.api = api
        self.tokens = api.tokens
        self.policy = policy or PasswordPolicy()

    def _validate_password(self, password: str) -> None:
        if len(password or "") < self.policy.min_length:
            raise ValidationError(f"Password must have at least {self.policy.min_length} characters.")

    def register(self, name: str, email: str, phone: str, password: str) -> ActionResult:
        if not (name or "").strip():
            raise ValidationError("Name is required.")
        self._validate_password(password)
        body = self.api.post(
            "/auth/register",
            json={"name": name.strip(), "email": _require_email(email), "phone": (phone or "").strip(), "password": password},
            fallback_message="Registration failed",
        )
        return _result(body)

    def login(self, email: str, password: str) -> LoginResult:
        if not password:
            raise ValidationError("Password is required.")
        body = self.api.post(
            "/auth/login",
            json={"email": _require_email(email), "password": password},
            fallback_message="Login failed",
        )
        access = body.get("accessToken")
        refresh = body.get("refreshToken")
        if access or refresh:
            self.tokens.set_tokens(access, refresh)

        user = body.get("user")
        log.info("login_succeeded has_user=%s", bool(user))
        return LoginResult(
            user=current_user_from_api(user) if isinstance(user, dict) else None,
            access_token=access,
            refresh_token=refresh,
            message=to_str(body.get("message")),
        )

    def refresh(self) -> str:
        return self.api.refresh_session()

    def logout(self) -> None:
        """Invalidate the session server-side; local tokens are dropped regardless."""
        try:
            self.api.post("/auth/logout", fallback_message="Logout failed")
        except ApiError as e:
            log.warning("server_logout_failed error=%s", e)
        finally:
            self.tokens.clear()

    def forgot_password(self, email: str) -> ActionResult:
        body = self.api.post(
            "/password/forgot",
            json={"email": _require_email(email)},
            fallback_message="Forgot password request failed",
        )
        return _result(body)

    def reset_password(self, token: str, new_password: str) -> ActionResult:
        if not (token or "").strip():
            raise ValidationError("Reset token is required.")
        self._validate_password(new_password)
        body = self.api.post(
            "/password/reset",
            json={"token": token.strip(), "newPassword": new_password},
            fallback_message="Password reset failed",
        )
        return _result(body)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> ActionResult:
        if not current_password:
            raise ValidationError("Current password is required.")
        self._validate_password(new_password)
        if new_password != confirm_password:
            raise ValidationError("Password confirmation does not match.")
        if new_password == current_password:
            raise ValidationError("New password must be different from the current password.")
        body = self.api.post(
            "/auth/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
            fallback_message="Change password failed",
        )
        return _result(body)

    def is_authenticated(self) -> bool:
        return self.tokens.has_any()
