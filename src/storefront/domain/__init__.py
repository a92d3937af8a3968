from .models import Cart, CartItem, Order, OrderStatus, PaymentMethod, Product, Wallet
from .errors import (
    ApiError,
    AppError,
    AuthenticationError,
    AuthorizationError,
    InsufficientFundsError,
    NetworkError,
    NotFoundError,
    PaymentError,
    ValidationError,
)

__all__ = [
    "Cart",
    "CartItem",
    "Order",
    "OrderStatus",
    "PaymentMethod",
    "Product",
    "Wallet",
    "ApiError",
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "InsufficientFundsError",
    "NetworkError",
    "NotFoundError",
    "PaymentError",
    "ValidationError",
]
