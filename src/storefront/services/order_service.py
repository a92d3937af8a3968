from __future__ import annotations

import logging
from typing import Iterable, Optional

from storefront.domain.errors import ApiError, ValidationError
from storefront.domain.models import CartItem, Order, OrderStats, Page, PaymentMethod
from storefront.domain.normalize import order_from_api, order_stats_from_api, page_from_api

log = logging.getLogger(__name__)


def _order_body(body) -> Order:
    data = body.get("order") if isinstance(body, dict) and isinstance(body.get("order"), dict) else body
    if not isinstance(data, dict) or not (data.get("id") or data.get("orderId")):
        raise ApiError("Order response did not include an order id.", payload=body)
    return order_from_api(data)


class OrderService:
    def __init__(self, api):
        self.api = api

    def list_orders(self, page: int | None = None, page_size: int | None = None) -> Page[Order]:
        body = self.api.get(
            "/orders",
            params={"page": page, "pageSize": page_size},
            fallback_message="Failed to fetch orders",
        )
        return page_from_api(body, order_from_api, "items", "orders")

    def get_order(self, order_id: str) -> Order:
        return _order_body(self.api.get(f"/orders/{order_id}", fallback_message="Failed to fetch order"))

    def get_stats(self) -> OrderStats:
        body = self.api.get("/orders/stats", fallback_message="Failed to fetch order stats")
        return order_stats_from_api(body.get("stats") or {})

    def create_order(
        self,
        items: Iterable[CartItem],
        payment_method: PaymentMethod,
        voucher_code: Optional[str] = None,
    ) -> Order:
        """
        items: cart lines; only product id and quantity are sent, the server prices them.
        """
        lines = [{"productId": it.product_id, "quantity": int(it.quantity)} for it in items]
        if not lines:
            raise ValidationError("Cart is empty.")
        for line in lines:
            if line["quantity"] <= 0:
                raise ValidationError("Qty must be >= 1.")

        payload = {"items": lines, "paymentMethod": PaymentMethod(payment_method).value}
        if voucher_code:
            payload["voucherCode"] = voucher_code
        order = _order_body(self.api.post("/orders", json=payload, fallback_message="Failed to create order"))
        log.info("order_created order_id=%s lines=%s method=%s", order.id, len(lines), payload["paymentMethod"])
        return order

    def cancel_order(self, order_id: str) -> Optional[Order]:
        body = self.api.post(f"/orders/{order_id}/cancel", fallback_message="Failed to cancel order")
        log.info("order_cancelled order_id=%s", order_id)
        data = body.get("order") if isinstance(body, dict) else None
        return order_from_api(data) if isinstance(data, dict) else None

    def checkout(
        self,
        payment_method: PaymentMethod = PaymentMethod.WALLET,
        use_wallet: bool = True,
        voucher_code: Optional[str] = None,
    ) -> dict:
        """Server-side one-shot checkout of the whole cart; returns the raw envelope (``orderId`` etc.)."""
        payload = {"paymentMethod": PaymentMethod(payment_method).value, "useWallet": bool(use_wallet)}
        if voucher_code:
            payload["voucherCode"] = voucher_code
        return self.api.post("/orders/checkout", json=payload, fallback_message="Checkout failed")
