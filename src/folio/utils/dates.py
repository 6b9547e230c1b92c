"""
Date parsing helpers for transaction records and CLI options.
"""
from __future__ import annotations

from datetime import date, datetime


def parse_iso_date(s: str | None) -> date | None:
    """Parse ISO date string (YYYY-MM-DD) to date."""
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except (ValueError, TypeError):
        return None


def parse_trade_date(value: object) -> date:
    """
    Parse a settlement date from a raw record.

    Handles date/datetime objects, ISO strings (optionally with a time part)
    and the DD-MM-YYYY / DD/MM/YYYY forms found in some registrar exports.
    Raises ValueError on failure.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    s = str(value if value is not None else "").strip()
    if not s:
        raise ValueError("empty date")
    d = parse_iso_date(s)
    if d is not None:
        return d
    for fmt in ("%d-%m-%Y", "%d/%m/%Y", "%d-%b-%Y"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date: {s!r}")


def days_between(d1: date, d2: date) -> int:
    """Return number of days between two dates."""
    return (d2 - d1).days


def today() -> date:
    return date.today()
