"""Utility helpers (calendar math)."""

from .calendar import (
    WEEKDAYS,
    month_label,
    month_start,
    next_month_start,
    parse_month,
    shift_months,
    utcnow,
)

__all__ = [
    "WEEKDAYS",
    "month_label",
    "month_start",
    "next_month_start",
    "parse_month",
    "shift_months",
    "utcnow",
]
