from __future__ import annotations

from datetime import date, datetime
import logging

from openpyxl import load_workbook

from storefront.domain.errors import ValidationError

log = logging.getLogger(__name__)


def _cell_text(value) -> str | None:
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    text = str(value).strip()
    return text or None


class ExcelService:
    def __init__(self, inventory_service):
        self.inventory = inventory_service

    def import_inventory_excel(self, path: str, product_id: str, default_cost_price: float = 0.0) -> tuple[int, int]:
        """
        One inventory secret per row, sent to the server as a single bulk add.
        Headers:
          secret_data | notes | account_expires_at | cost_price
        Only secret_data is required; blank rows are skipped.
        """
        wb = load_workbook(path, read_only=True, data_only=True)
        try:
            ws = wb.active
            rows = ws.iter_rows(values_only=True)
            header_row = next(rows, None)
            if header_row is None:
                raise ValidationError("Workbook is empty.")

            headers = {}
            for col, v in enumerate(header_row):
                if isinstance(v, str):
                    headers[v.strip().lower()] = col

            if "secret_data" not in headers:
                raise ValidationError("Missing column header: secret_data")

            def cell(row, name):
                col = headers.get(name)
                if col is None or col >= len(row):
                    return None
                return row[col]

            items = []
            skipped = 0
            for idx, row in enumerate(rows, start=2):
                secret = _cell_text(cell(row, "secret_data"))
                if not secret:
                    skipped += 1
                    continue

                raw_cost = cell(row, "cost_price")
                try:
                    cost = float(raw_cost) if raw_cost not in (None, "") else float(default_cost_price)
                except (TypeError, ValueError):
                    log.warning("inventory_import_skipped row=%s reason=bad_cost_price", idx)
                    skipped += 1
                    continue
                if cost < 0:
                    skipped += 1
                    continue

                items.append(
                    {
                        "secret_data": secret,
                        "notes": _cell_text(cell(row, "notes")),
                        "account_expires_at": _cell_text(cell(row, "account_expires_at")),
                        "cost_price": cost,
                    }
                )
        finally:
            wb.close()

        if not items:
            raise ValidationError("No inventory rows found in workbook.")

        added = self.inventory.bulk_add(product_id, items)
        log.info("inventory_import path=%s added=%s skipped=%s", path, added, skipped)
        return added, skipped
