"""Device table queries: substring search and page slicing."""

from __future__ import annotations

import math
from collections.abc import Sequence

from posture.models import Device


def filter_devices(devices: Sequence[Device], query: str | None) -> list[Device]:
    """Case-insensitive substring match on hostname, user or department."""
    if not query:
        return list(devices)
    needle = query.lower()
    return [
        d
        for d in devices
        if needle in d.hostname.lower()
        or (d.user and needle in d.user.lower())
        or (d.department and needle in d.department.lower())
    ]


def paginate(devices: Sequence[Device], page_size: int, page_number: int) -> list[Device]:
    """Straight slice of 1-based page ``page_number``; no clamping."""
    start = (page_number - 1) * page_size
    if start < 0 or page_size <= 0:
        return []
    return list(devices[start : start + page_size])


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        return 0
    return math.ceil(total / page_size)


def clamp_page(page_number: int, total: int, page_size: int) -> int:
    """Caller-side helper: pull ``page_number`` into ``[1, page_count]``."""
    return max(1, min(page_number, page_count(total, page_size) or 1))
