"""Base adapter interface: raw source row -> (canonical hostname, typed detail)."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from posture.models import Platform, SourceDetail
from posture.normalize import clean_cell, normalize_hostname, parse_date

logger = logging.getLogger(__name__)

Row = Mapping[str, Any]


@dataclass(frozen=True)
class SourceFact:
    """A single row's claim about one device."""

    hostname: str
    platform: Platform
    detail: SourceDetail


@dataclass
class SourceFacts:
    """Every fact one platform produced, in row order."""

    platform: Platform
    facts: list[SourceFact] = field(default_factory=list)
    dropped: int = 0


class BaseAdapter:
    """Abstract adapter.  Subclasses set ``platform`` and ``identity_columns``
    and implement ``build_detail``.
    """

    platform: Platform
    identity_columns: tuple[str, ...] = ()

    def adapt(self, row: Row) -> SourceFact | None:
        """Map one raw row; rows with an empty identity are dropped."""
        cells = {str(k).strip(): v for k, v in row.items() if k is not None}
        hostname = normalize_hostname(self._value(cells, *self.identity_columns))
        if not hostname:
            return None
        return SourceFact(hostname=hostname, platform=self.platform, detail=self.build_detail(cells))

    def adapt_rows(self, rows: Iterable[Row]) -> SourceFacts:
        result = SourceFacts(platform=self.platform)
        for row in rows:
            fact = self.adapt(row)
            if fact is None:
                result.dropped += 1
                continue
            result.facts.append(fact)
        if result.dropped:
            logger.debug("%s: dropped %d rows without an identity", self.platform.value, result.dropped)
        return result

    def build_detail(self, cells: Row) -> SourceDetail:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Cell helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _value(cells: Row, *columns: str) -> Any:
        """First non-empty cell among ``columns``."""
        for column in columns:
            value = clean_cell(cells.get(column))
            if value is not None:
                return value
        return None

    @classmethod
    def _text(cls, cells: Row, *columns: str) -> str | None:
        value = cls._value(cells, *columns)
        return None if value is None else str(value)

    @classmethod
    def _date(cls, cells: Row, column: str) -> datetime | None:
        return parse_date(cls._value(cells, column))
