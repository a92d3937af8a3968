from __future__ import annotations

import logging
from typing import Iterable, Optional

from storefront.domain.errors import ValidationError
from storefront.domain.models import InventoryItem, InventoryStats
from storefront.domain.normalize import (
    inventory_item_from_api,
    inventory_stats_from_api,
    many,
    to_int,
)

log = logging.getLogger(__name__)

MAX_BULK_ITEMS = 1000


def parse_bulk_text(text: str) -> list[str]:
    """One secret per non-blank line, surrounding whitespace stripped."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def _bulk_entry(
    secret_data: str,
    notes: Optional[str] = None,
    account_expires_at: Optional[str] = None,
    cost_price: Optional[float] = None,
) -> dict:
    secret = (secret_data or "").strip()
    if not secret:
        raise ValidationError("Secret data is required.")
    if cost_price is not None and float(cost_price) < 0:
        raise ValidationError("Cost price must be >= 0.")
    entry = {"secretData": secret, "notes": notes, "accountExpiresAt": account_expires_at, "costPrice": cost_price}
    return {k: v for k, v in entry.items() if v is not None}


class InventoryService:
    """Admin stock of deliverable secrets (accounts, keys) attached to products."""

    def __init__(self, api):
        self.api = api

    def get_stats(self) -> InventoryStats:
        body = self.api.get("/admin/inventory/stats", fallback_message="Failed to fetch inventory stats")
        return inventory_stats_from_api(body.get("stats") or {})

    def list_expiring(self, days: int = 7) -> list[InventoryItem]:
        if days <= 0:
            raise ValidationError("Days must be >= 1.")
        body = self.api.get(
            "/admin/inventory/expiring",
            params={"days": int(days)},
            fallback_message="Failed to fetch expiring inventory",
        )
        return many(inventory_item_from_api, body.get("items"))

    def list_for_product(
        self,
        product_id: str,
        show_sold: bool | None = None,
        show_expired: bool | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> tuple[list[InventoryItem], int]:
        body = self.api.get(
            f"/admin/inventory/{product_id}",
            params={"showSold": show_sold, "showExpired": show_expired, "limit": limit, "offset": offset},
            fallback_message="Failed to fetch product inventory",
        )
        items = many(inventory_item_from_api, body.get("items"))
        return items, to_int(body.get("count"), len(items))

    def add_item(
        self,
        product_id: str,
        secret_data: str,
        notes: Optional[str] = None,
        account_expires_at: Optional[str] = None,
        cost_price: Optional[float] = None,
        source: Optional[str] = None,
    ) -> Optional[InventoryItem]:
        if not product_id:
            raise ValidationError("Product is required.")
        payload = {"productId": product_id, **_bulk_entry(secret_data, notes, account_expires_at, cost_price)}
        if source:
            payload["source"] = source
        body = self.api.post("/admin/inventory", json=payload, fallback_message="Failed to add inventory item")
        item = body.get("item")
        log.info("inventory_item_added product_id=%s", product_id)
        return inventory_item_from_api(item) if isinstance(item, dict) else None

    def bulk_add(self, product_id: str, items: Iterable[dict], items_text: Optional[str] = None) -> int:
        """
        items: [{secret_data, notes?, account_expires_at?, cost_price?}]
        Returns how many rows the server accepted.
        """
        if not product_id:
            raise ValidationError("Product is required.")
        entries = [_bulk_entry(**it) for it in items]
        if not entries:
            raise ValidationError("No inventory items to add.")
        if len(entries) > MAX_BULK_ITEMS:
            raise ValidationError(f"At most {MAX_BULK_ITEMS} items per bulk upload.")

        payload = {"productId": product_id, "items": entries}
        if items_text:
            payload["itemsText"] = items_text
        body = self.api.post("/admin/inventory/bulk", json=payload, fallback_message="Failed to add inventory items")
        count = to_int(body.get("count"), len(entries))
        log.info("inventory_bulk_added product_id=%s sent=%s accepted=%s", product_id, len(entries), count)
        return count

    def bulk_add_text(self, product_id: str, text: str, cost_price: float = 0.0) -> int:
        lines = parse_bulk_text(text)
        return self.bulk_add(
            product_id,
            [{"secret_data": line, "cost_price": cost_price} for line in lines],
            items_text=text,
        )

    def delete_item(self, item_id: str) -> None:
        self.api.delete(f"/admin/inventory/{item_id}", fallback_message="Failed to delete inventory item")

    def sync_stock(self) -> str:
        body = self.api.post("/admin/inventory/sync-stock", fallback_message="Failed to sync stock")
        return str(body.get("message") or "")
