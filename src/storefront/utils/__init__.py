from .formatting import (
    format_currency,
    format_date,
    format_date_short,
    format_file_size,
    format_time,
)

__all__ = [
    "format_currency",
    "format_date",
    "format_date_short",
    "format_file_size",
    "format_time",
]
