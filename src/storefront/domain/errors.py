from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class InsufficientFundsError(AppError):
    pass


class ApiError(AppError):
    """Non-2xx answer from the backend, or no answer at all."""

    def __init__(self, message: str, status: int | None = None, payload: Any = None):
        super().__init__(message)
        self.status = status
        self.payload = payload


class NetworkError(ApiError):
    pass


class NotFoundError(ApiError):
    pass


class AuthenticationError(ApiError):
    pass


class AuthorizationError(ApiError):
    pass


class PaymentError(AppError):
    """The order exists but its payment step failed."""

    def __init__(self, message: str, order_id: str):
        super().__init__(message)
        self.order_id = order_id
