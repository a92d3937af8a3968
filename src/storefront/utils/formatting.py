from __future__ import annotations

from datetime import datetime
import math
from numbers import Real
from typing import Any, Optional

INVALID_DATE = "Ngày không hợp lệ"
INVALID_TIME = "Giờ không hợp lệ"
CURRENCY_SUFFIX = "đ"

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_currency(amount: Any) -> str:
    """
    Vietnamese money text: ``1234567`` -> ``"1.234.567đ"``, ``1234.5`` -> ``"1.234,5đ"``.
    Numeric strings such as ``"12000.00"`` are parsed first. Anything that is
    not a finite number renders as ``"0đ"``.
    """
    if isinstance(amount, str):
        try:
            value = float(amount.strip())
        except ValueError:
            return f"0{CURRENCY_SUFFIX}"
    elif isinstance(amount, bool) or not isinstance(amount, Real):
        return f"0{CURRENCY_SUFFIX}"
    else:
        value = float(amount)
    if not math.isfinite(value):
        return f"0{CURRENCY_SUFFIX}"

    text = f"{abs(value):,.3f}".rstrip("0").rstrip(".")
    whole, _, frac = text.partition(".")
    whole = whole.replace(",", ".")
    sign = "-" if value < 0 and text != "0" else ""
    return f"{sign}{whole}{',' + frac if frac else ''}{CURRENCY_SUFFIX}"


def _parse(value: Optional[str]) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        dt = datetime.fromisoformat(text)
    except ValueError:
        return None
    # aware timestamps are shown in local time, naive ones as written
    return dt.astimezone() if dt.tzinfo is not None else dt


def format_date(value: Optional[str]) -> str:
    dt = _parse(value)
    if dt is None:
        return INVALID_DATE
    return f"{dt:%H:%M} {dt.day} tháng {dt.month}, {dt.year}"


def format_date_short(value: Optional[str]) -> str:
    dt = _parse(value)
    if dt is None:
        return INVALID_DATE
    return f"{dt:%d/%m/%Y}"


def format_time(value: Optional[str]) -> str:
    dt = _parse(value)
    if dt is None:
        return INVALID_TIME
    return f"{dt:%H:%M}"


def format_file_size(size: float) -> str:
    if not size or size <= 0:
        return "0 Bytes"
    scaled = float(size)
    i = 0
    while scaled >= 1024 and i < len(_SIZE_UNITS) - 1:
        scaled /= 1024
        i += 1
    return f"{round(scaled, 2):g} {_SIZE_UNITS[i]}"
