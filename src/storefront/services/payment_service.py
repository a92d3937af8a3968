from __future__ import annotations

import logging
from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import PaymentMethod, PaymentStart
from storefront.domain.normalize import instructions_from_api, opt_str, to_str

log = logging.getLogger(__name__)


def _payment_start(body: dict) -> PaymentStart:
    instr = body.get("instructions")
    return PaymentStart(
        transaction_id=opt_str(body.get("transactionId")),
        instructions=instructions_from_api(instr) if isinstance(instr, dict) else None,
        message=to_str(body.get("message")),
    )


class PaymentService:
    """External gateway payments (bank transfer via SePay, MoMo)."""

    def __init__(self, api):
        self.api = api

    def start_payment(self, order_id: str, amount: float) -> PaymentStart:
        if not order_id:
            raise ValidationError("Order id is required.")
        if float(amount) < 0:
            raise ValidationError("Amount must be >= 0.")
        body = self.api.post(
            "/payments/start",
            json={"orderId": order_id, "amount": float(amount)},
            fallback_message="Failed to start payment",
        )
        log.info("payment_started order_id=%s amount=%.0f", order_id, float(amount))
        return _payment_start(body)

    def checkout(self, payment_method: PaymentMethod, voucher_code: Optional[str] = None) -> tuple[Optional[str], PaymentStart]:
        """Gateway checkout of the current cart in one call; returns ``(order_id, start)``."""
        method = PaymentMethod(payment_method)
        if not method.is_external:
            raise ValidationError("Gateway checkout needs an external payment method.")
        payload = {"paymentMethod": method.value}
        if voucher_code:
            payload["voucherCode"] = voucher_code
        body = self.api.post("/payments/checkout", json=payload, fallback_message="Checkout failed")
        return opt_str(body.get("orderId")), _payment_start(body)
