"""Month arithmetic and timezone helpers shared by the services."""

from __future__ import annotations

from datetime import date, datetime, timezone

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def month_start(value: date | datetime | None = None) -> date:
    if value is None:
        value = utcnow()
    if isinstance(value, datetime):
        value = value.date()
    return value.replace(day=1)


def next_month_start(value: date | datetime | None = None) -> date:
    first = month_start(value)
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def shift_months(value: date, months: int) -> date:
    first = month_start(value)
    index = first.year * 12 + (first.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def parse_month(raw: str | None) -> date | None:
    """Parse `YYYY-MM` or `YYYY-MM-DD` into the first day of that month."""

    if raw is None:
        return None
    raw = raw.strip()
    for fmt in ("%Y-%m", "%Y-%m-%d"):
        try:
            return month_start(datetime.strptime(raw, fmt).date())
        except ValueError:
            continue
    raise ValueError(f"Invalid month value: {raw!r}")


def month_label(value: date) -> str:
    return value.strftime("%Y-%m")
