import math
from datetime import datetime, timezone

import pytest

from storefront.utils.formatting import (
    INVALID_DATE,
    INVALID_TIME,
    format_currency,
    format_date,
    format_date_short,
    format_file_size,
    format_time,
)


@pytest.mark.parametrize("value", [None, "abc", "", "inf", math.nan, True, [], {}])
def test_format_currency_invalid_input_is_zero(value):
    assert format_currency(value) == "0đ"


def test_format_currency_parses_numeric_strings():
    assert format_currency("12000.00") == "12.000đ"
    assert format_currency(" 1234567 ") == "1.234.567đ"
    assert format_currency("-2500.5") == "-2.500,5đ"


def test_format_currency_groups_thousands_vietnamese_style():
    assert format_currency(1234567) == "1.234.567đ"
    assert format_currency(0) == "0đ"
    assert format_currency(999) == "999đ"
    assert format_currency(1234.5) == "1.234,5đ"
    assert format_currency(-25000) == "-25.000đ"


def test_format_currency_keeps_at_most_three_fraction_digits():
    assert format_currency(1.23456) == "1,235đ"


@pytest.mark.parametrize("fn, marker", [(format_date, INVALID_DATE), (format_date_short, INVALID_DATE), (format_time, INVALID_TIME)])
@pytest.mark.parametrize("value", ["", "   ", None, "not a date", "2024-13-45"])
def test_date_helpers_return_invalid_marker(fn, marker, value):
    assert fn(value) == marker


def test_format_date_long_form():
    assert format_date("2024-05-07T09:05:00") == "09:05 7 tháng 5, 2024"


def test_format_date_short_and_time():
    assert format_date_short("2024-05-07T09:05:00") == "07/05/2024"
    assert format_time("2024-05-07T21:45:10") == "21:45"


def test_utc_timestamps_are_shown_in_local_time():
    local = datetime(2024, 5, 7, 9, 5, tzinfo=timezone.utc).astimezone()
    assert format_time("2024-05-07T09:05:00Z") == f"{local:%H:%M}"
    assert format_date_short("2024-05-07T09:05:00.000Z") == f"{local:%d/%m/%Y}"


@pytest.mark.parametrize(
    "size, expected",
    [(0, "0 Bytes"), (512, "512 Bytes"), (1024, "1 KB"), (1536, "1.5 KB"), (5 * 1024 * 1024, "5 MB"), (3 * 1024 ** 3, "3 GB")],
)
def test_format_file_size(size, expected):
    assert format_file_size(size) == expected
