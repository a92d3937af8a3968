from __future__ import annotations

from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import Page, Voucher, VoucherQuote
from storefront.domain.normalize import page_from_api, to_float, to_str, voucher_from_api


def _voucher_payload(
    code: Optional[str] = None,
    description: Optional[str] = None,
    discount_percent: Optional[float] = None,
    discount_amount: Optional[float] = None,
    max_uses: Optional[int] = None,
    valid_from: Optional[str] = None,
    valid_to: Optional[str] = None,
    is_active: Optional[bool] = None,
) -> dict:
    if discount_percent is not None and not 0 <= float(discount_percent) <= 100:
        raise ValidationError("Discount percent must be between 0 and 100.")
    if discount_amount is not None and float(discount_amount) < 0:
        raise ValidationError("Discount amount must be >= 0.")
    if max_uses is not None and int(max_uses) < 0:
        raise ValidationError("Max uses must be >= 0.")
    fields = {
        "code": code.strip().upper() if code is not None else None,
        "description": description,
        "discount_percent": discount_percent,
        "discount_amount": discount_amount,
        "max_uses": max_uses,
        "valid_from": valid_from,
        "valid_to": valid_to,
        "is_active": is_active,
    }
    return {k: v for k, v in fields.items() if v is not None}


class VoucherService:
    def __init__(self, api):
        self.api = api

    def apply(self, code: str, amount: float) -> VoucherQuote:
        """Ask the server what ``amount`` becomes with ``code`` applied."""
        code = (code or "").strip()
        if not code:
            raise ValidationError("Voucher code is required.")
        amount = float(amount)
        body = self.api.post(
            "/vouchers/apply",
            json={"code": code, "amount": amount},
            fallback_message="Voucher is not valid",
        )
        discounted = to_float(body.get("discountedAmount"), amount)
        discount = body.get("discount")
        discount = to_float(discount) if discount is not None else amount - discounted
        return VoucherQuote(
            code=code,
            discounted_amount=max(discounted, 0.0),
            discount=max(discount, 0.0),
            message=to_str(body.get("message")),
        )

    # admin

    def list_vouchers(self) -> Page[Voucher]:
        body = self.api.get("/admin/vouchers", fallback_message="Failed to fetch vouchers")
        return page_from_api(body, voucher_from_api, "vouchers")

    def create_voucher(self, code: str, **fields) -> Voucher:
        if not (code or "").strip():
            raise ValidationError("Voucher code is required.")
        body = self.api.post(
            "/admin/vouchers",
            json=_voucher_payload(code=code, **fields),
            fallback_message="Failed to create voucher",
        )
        return voucher_from_api(body.get("voucher") or body)

    def update_voucher(self, voucher_id: str, **changes) -> Voucher:
        payload = _voucher_payload(**changes)
        if not payload:
            raise ValidationError("Nothing to update.")
        body = self.api.put(f"/admin/vouchers/{voucher_id}", json=payload, fallback_message="Failed to update voucher")
        return voucher_from_api(body.get("voucher") or body)

    def delete_voucher(self, voucher_id: str) -> None:
        self.api.delete(f"/admin/vouchers/{voucher_id}", fallback_message="Failed to delete voucher")
