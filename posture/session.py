"""Upload state for one running process (no persistence).

Each upload replaces that platform's rows wholesale, recomputes the whole
inventory, and publishes snapshot + report together in one assignment, so a
reader never sees a report that does not match the snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any

from posture.config import PostureConfig
from posture.models import Platform
from posture.pipeline import InventoryReport, SourceSnapshot, run_pipeline

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceStatus:
    platform: Platform
    filename: str
    row_count: int
    uploaded_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "platform": self.platform.value,
            "slug": self.platform.slug,
            "filename": self.filename,
            "row_count": self.row_count,
            "uploaded_at": self.uploaded_at.isoformat(),
        }


@dataclass(frozen=True)
class _State:
    snapshot: SourceSnapshot = field(default_factory=SourceSnapshot)
    files: Mapping[Platform, SourceStatus] = field(default_factory=lambda: MappingProxyType({}))
    report: InventoryReport | None = None


class InventorySession:
    """Holds the latest snapshot and the report computed from it."""

    def __init__(self, config: PostureConfig | None = None) -> None:
        self.config = config or PostureConfig()
        self._state = _State()

    @property
    def snapshot(self) -> SourceSnapshot:
        return self._state.snapshot

    @property
    def report(self) -> InventoryReport | None:
        return self._state.report

    def source_status(self) -> dict[Platform, SourceStatus | None]:
        files = self._state.files
        return {platform: files.get(platform) for platform in Platform}

    def upload(
        self,
        platform: Platform,
        rows: Iterable[Mapping[str, Any]],
        filename: str,
        now: datetime | None = None,
    ) -> InventoryReport:
        """Replace ``platform``'s rows and recompute everything."""
        now = now or datetime.now(tz=timezone.utc)
        snapshot = self._state.snapshot.with_rows(platform, rows)
        files = dict(self._state.files)
        files[platform] = SourceStatus(platform, filename, len(snapshot.rows_for(platform)), now)
        report = run_pipeline(snapshot, now=now, config=self.config)
        self._state = _State(snapshot, MappingProxyType(files), report)
        logger.info("%s data replaced from %s (%d rows)", platform.value, filename, files[platform].row_count)
        return report

    def clear(self, platform: Platform, now: datetime | None = None) -> InventoryReport | None:
        snapshot = self._state.snapshot.without(platform)
        files = {p: s for p, s in self._state.files.items() if p is not platform}
        report = None if snapshot.is_empty else run_pipeline(snapshot, now=now, config=self.config)
        self._state = _State(snapshot, MappingProxyType(files), report)
        return report

    def report_at(self, now: datetime) -> InventoryReport | None:
        """Recompute the current snapshot as of ``now``; nothing is stored."""
        snapshot = self._state.snapshot
        if snapshot.is_empty:
            return None
        return run_pipeline(snapshot, now=now, config=self.config)
