"""Identity normalisation and tolerant value parsing shared by the adapters."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

import pandas as pd

_WHITESPACE_RUN = re.compile(r"\s+")

# pandas resolves these against the wall clock
_RELATIVE_DATE_WORDS = frozenset({"now", "today", "yesterday", "tomorrow"})


def normalize_hostname(raw: Any) -> str:
    """Canonical join key for a device name.

    ``"  Host A "`` → ``"host-a"``. ``None`` maps to ``""``.
    """
    if raw is None:
        return ""
    return _WHITESPACE_RUN.sub("-", str(raw).lower().strip())


def parse_date(value: Any) -> datetime | None:
    """Parse a date-like cell into an aware UTC datetime.

    Empty or unparseable values return ``None`` (unknown), never epoch/now.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    if not isinstance(value, str) or not value.strip():
        return None
    if value.strip().lower() in _RELATIVE_DATE_WORDS:
        return None
    try:
        ts = pd.to_datetime(value.strip(), errors="coerce", utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(ts):
        return None
    return ts.to_pydatetime()


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_since(value: datetime, now: datetime) -> float:
    return (as_utc(now) - as_utc(value)).total_seconds() / 86400


def is_false(value: Any) -> bool:
    """Exports deliver flags either as booleans or as ``"false"``/``"False"``."""
    return value is False or value in ("false", "False")


def is_blank(value: Any) -> bool:
    return value is None or value == ""


def clean_cell(value: Any) -> Any:
    """Strip string cells; empty strings become ``None``."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value
