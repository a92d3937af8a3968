from __future__ import annotations

from typing import Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import ActionResult, DiscountType, Promotion, PromotionQuote
from storefront.domain.normalize import many, promotion_from_api, to_bool, to_float, to_str


def _promotion_payload(
    name: Optional[str] = None,
    type: Optional[DiscountType] = None,
    value: Optional[float] = None,
    description: Optional[str] = None,
    min_order_amount: Optional[float] = None,
    max_discount_amount: Optional[float] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    is_active: Optional[bool] = None,
    usage_limit: Optional[int] = None,
) -> dict:
    kind = DiscountType(type) if type is not None else None
    if value is not None:
        if float(value) <= 0:
            raise ValidationError("Promotion value must be > 0.")
        if kind is DiscountType.PERCENTAGE and float(value) > 100:
            raise ValidationError("Percentage promotions cannot exceed 100.")
    if start_date and end_date and end_date < start_date:
        raise ValidationError("End date must not be before start date.")
    fields = {
        "name": name.strip() if name is not None else None,
        "type": kind.value if kind else None,
        "value": value,
        "description": description,
        "minOrderAmount": min_order_amount,
        "maxDiscountAmount": max_discount_amount,
        "startDate": start_date,
        "endDate": end_date,
        "isActive": is_active,
        "usageLimit": usage_limit,
    }
    return {k: v for k, v in fields.items() if v is not None}


def _result(body: dict) -> ActionResult:
    return ActionResult(success=to_bool(body.get("success"), True), message=to_str(body.get("message")))


class PromotionService:
    def __init__(self, api):
        self.api = api

    def list_active(self) -> list[Promotion]:
        body = self.api.get("/public/promotions", fallback_message="Failed to fetch promotions")
        return many(promotion_from_api, body.get("promotions"))

    def validate(self, code: str, amount: float) -> PromotionQuote:
        code = (code or "").strip()
        if not code:
            raise ValidationError("Promotion code is required.")
        body = self.api.post(
            "/promotions/validate",
            json={"code": code, "amount": float(amount)},
            fallback_message="Promotion is not valid",
        )
        promo = body.get("promotion")
        return PromotionQuote(
            code=code,
            discount_amount=max(to_float(body.get("discountAmount")), 0.0),
            promotion=promotion_from_api(promo) if isinstance(promo, dict) else None,
            message=to_str(body.get("message")),
        )

    # admin

    def list_promotions(self) -> list[Promotion]:
        body = self.api.get("/admin/promotions", fallback_message="Failed to fetch promotions")
        return many(promotion_from_api, body.get("promotions"))

    def create_promotion(self, name: str, type: DiscountType, value: float, start_date: str, end_date: str, **extra) -> ActionResult:
        if not (name or "").strip():
            raise ValidationError("Promotion name is required.")
        payload = _promotion_payload(name=name, type=type, value=value, start_date=start_date, end_date=end_date, **extra)
        return _result(self.api.post("/admin/promotions", json=payload, fallback_message="Failed to create promotion"))

    def update_promotion(self, promotion_id: str, **changes) -> ActionResult:
        payload = _promotion_payload(**changes)
        if not payload:
            raise ValidationError("Nothing to update.")
        return _result(
            self.api.put(f"/admin/promotions/{promotion_id}", json=payload, fallback_message="Failed to update promotion")
        )

    def delete_promotion(self, promotion_id: str) -> ActionResult:
        return _result(self.api.delete(f"/admin/promotions/{promotion_id}", fallback_message="Failed to delete promotion"))
