# SPDX-License-Identifier: Apache-2.0

"""
Date helpers shared by the domain layer.

Calendar dates travel as ``YYYY-MM-DD`` strings and instants as ISO-8601
timestamps, the same shapes the board clients send and store.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

APPEAL_WINDOW_DAYS = 30


def utc_now() -> datetime:
    """Current instant in UTC."""
    return datetime.now(timezone.utc)


def to_iso(moment: datetime) -> str:
    """Serialize an instant as an ISO-8601 string."""
    return moment.isoformat()


def utc_now_iso() -> str:
    """Current instant as an ISO-8601 string."""
    return to_iso(utc_now())


def local_date_iso(moment: Optional[datetime] = None) -> str:
    """Calendar date (``YYYY-MM-DD``) of the given instant."""
    moment = moment or utc_now()
    return moment.date().isoformat()


def parse_ymd(value: Optional[str]) -> Optional[date]:
    """
    Parse a ``YYYY-MM-DD`` string, or the date part of an ISO timestamp.

    Returns None for empty or malformed input instead of raising, since
    dates come straight from user-filled forms.
    """
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def format_date_br(value: Optional[str]) -> str:
    """Format a date string as ``DD/MM/YYYY`` (pt-BR)."""
    parsed = parse_ymd(value)
    if parsed is None:
        return ""
    return parsed.strftime("%d/%m/%Y")


def add_days(value: str, days: int) -> Optional[str]:
    """Shift a ``YYYY-MM-DD`` date by a number of days."""
    parsed = parse_ymd(value)
    if parsed is None:
        return None
    return (parsed + timedelta(days=days)).isoformat()


def appeal_deadline(decision_date: Optional[str]) -> Optional[str]:
    """Last day to appeal a decision published on ``decision_date``."""
    if not decision_date:
        return None
    return add_days(decision_date, APPEAL_WINDOW_DAYS)


def days_until(value: Optional[str], today: Optional[date] = None) -> Optional[int]:
    """Whole days from ``today`` until the given date (negative if past)."""
    target = parse_ymd(value)
    if target is None:
        return None
    today = today or utc_now().date()
    return (target - today).days
