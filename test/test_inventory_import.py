from pathlib import Path

import pytest
from openpyxl import Workbook

from storefront.domain.errors import ValidationError
from storefront.services.excel_service import ExcelService
from storefront.services.inventory_service import InventoryService, parse_bulk_text


def _workbook(path: Path, rows) -> Path:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    wb.save(path)
    return path


def test_parse_bulk_text_keeps_trimmed_non_blank_lines():
    assert parse_bulk_text("  a:1 \n\n b:2\r\n   \n") == ["a:1", "b:2"]
    assert parse_bulk_text("") == []


def test_bulk_add_text_sends_entries_and_raw_text(api, fake_session):
    fake_session.add("POST", "/admin/inventory/bulk", body={"count": 2})

    added = InventoryService(api).bulk_add_text("p1", "a:1\n\nb:2\n", cost_price=1000)

    assert added == 2
    sent = fake_session.calls[0].json
    assert sent["productId"] == "p1"
    assert sent["items"] == [{"secretData": "a:1", "costPrice": 1000}, {"secretData": "b:2", "costPrice": 1000}]
    assert sent["itemsText"] == "a:1\n\nb:2\n"


def test_bulk_add_rejects_negative_cost(api, fake_session):
    with pytest.raises(ValidationError, match="Cost price"):
        InventoryService(api).bulk_add("p1", [{"secret_data": "x", "cost_price": -1}])
    assert fake_session.calls == []


def test_list_expiring_needs_positive_days(api):
    with pytest.raises(ValidationError):
        InventoryService(api).list_expiring(days=0)


def test_excel_import_skips_blank_and_bad_rows(api, fake_session, tmp_path: Path):
    path = _workbook(
        tmp_path / "stock.xlsx",
        [
            ["Secret_Data", "notes", "cost_price", "account_expires_at"],
            ["user1:pass1", "first", 5000, None],
            [None, "no secret", 1, None],
            ["user2:pass2", None, "n/a", None],
            ["user3:pass3", None, None, "2025-01-31"],
        ],
    )
    fake_session.add("POST", "/admin/inventory/bulk", body={"count": 2})

    added, skipped = ExcelService(InventoryService(api)).import_inventory_excel(str(path), "p1", default_cost_price=100)

    assert (added, skipped) == (2, 2)
    items = fake_session.calls[0].json["items"]
    assert items == [
        {"secretData": "user1:pass1", "notes": "first", "costPrice": 5000.0},
        {"secretData": "user3:pass3", "accountExpiresAt": "2025-01-31", "costPrice": 100.0},
    ]


def test_excel_import_requires_secret_column(api, tmp_path: Path):
    path = _workbook(tmp_path / "bad.xlsx", [["account", "notes"], ["x", "y"]])

    with pytest.raises(ValidationError, match="secret_data"):
        ExcelService(InventoryService(api)).import_inventory_excel(str(path), "p1")


def test_excel_import_with_no_rows_sends_nothing(api, fake_session, tmp_path: Path):
    path = _workbook(tmp_path / "empty.xlsx", [["secret_data"]])

    with pytest.raises(ValidationError, match="No inventory rows"):
        ExcelService(InventoryService(api)).import_inventory_excel(str(path), "p1")
    assert fake_session.calls == []
