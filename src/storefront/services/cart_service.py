from __future__ import annotations

import logging

from storefront.domain.errors import ValidationError
from storefront.domain.models import Cart
from storefront.domain.normalize import cart_from_api

log = logging.getLogger(__name__)


def _require_qty(quantity: int) -> int:
    qty = int(quantity)
    if qty <= 0:
        raise ValidationError("Qty must be >= 1.")
    return qty


class CartService:
    """The cart lives on the server; every call returns its fresh state."""

    def __init__(self, api):
        self.api = api

    def get_cart(self) -> Cart:
        return cart_from_api(self.api.get("/cart", fallback_message="Failed to fetch cart"))

    def add_item(self, product_id: str, quantity: int = 1) -> Cart:
        body = self.api.post(
            "/cart/add",
            json={"productId": product_id, "quantity": _require_qty(quantity)},
            fallback_message="Failed to add item to cart",
        )
        log.info("cart_item_added product_id=%s qty=%s", product_id, quantity)
        return cart_from_api(body)

    def update_item(self, product_id: str, quantity: int) -> Cart:
        body = self.api.put(
            "/cart/update",
            json={"productId": product_id, "quantity": _require_qty(quantity)},
            fallback_message="Failed to update cart",
        )
        return cart_from_api(body)

    def remove_item(self, product_id: str) -> Cart:
        body = self.api.post("/cart/remove", json={"productId": product_id}, fallback_message="Failed to remove item")
        return cart_from_api(body)

    def clear(self) -> Cart:
        return cart_from_api(self.api.post("/cart/clear", fallback_message="Failed to clear cart"))
