"""FileImportAdapter — decode user-provided CSV/JSON exports into raw rows.

Supported formats:
- CSV with a header row (headers are trimmed, blank lines skipped)
- JSON array of objects
- JSON wrapper object with a ``data`` (or ``value``) key holding the array
"""

from __future__ import annotations

import csv
import io
import json
import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Return value from ``FileImportAdapter.parse_file``."""

    success: bool
    rows: list[dict[str, Any]] = field(default_factory=list)
    error: str = ""
    raw_count: int = 0


class FileImportAdapter:
    """Decodes one uploaded export file; does not interpret any column."""

    def parse_file(self, data: bytes, filename: str) -> ImportResult:
        """Parse a CSV or JSON file and return its rows."""
        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        try:
            if ext == "csv":
                return self._parse_csv(data)
            if ext == "json":
                return self._parse_json(data)
            return ImportResult(success=False, error=f"Unsupported file type: .{ext}")
        except (UnicodeDecodeError, ValueError, csv.Error) as exc:
            logger.exception("Failed to parse import file %s", filename)
            return ImportResult(success=False, error=str(exc))

    # ------------------------------------------------------------------
    # CSV parser
    # ------------------------------------------------------------------

    def _parse_csv(self, data: bytes) -> ImportResult:
        text = data.decode("utf-8-sig").strip()
        if not text:
            return ImportResult(success=False, error="Empty CSV file")

        reader = csv.reader(io.StringIO(text))
        header = next(reader, None)
        if not header or not any(h.strip() for h in header):
            return ImportResult(success=False, error="CSV has no header row")
        columns = [h.strip() for h in header]

        rows: list[dict[str, Any]] = []
        for record in reader:
            if not any(cell.strip() for cell in record):
                continue
            # Cells past the header are dropped; a repeated header keeps its last cell.
            rows.append(dict(zip(columns, record)))

        return ImportResult(success=True, rows=rows, raw_count=len(rows))

    # ------------------------------------------------------------------
    # JSON parser
    # ------------------------------------------------------------------

    def _parse_json(self, data: bytes) -> ImportResult:
        text = data.decode("utf-8-sig").strip()
        if not text:
            return ImportResult(success=False, error="Empty JSON file")

        parsed = json.loads(text)

        # Graph/Intune-style wrappers: {"value": [...]} or {"data": [...]}
        if isinstance(parsed, dict):
            for key in ("data", "value"):
                if isinstance(parsed.get(key), list):
                    parsed = parsed[key]
                    break

        if not isinstance(parsed, list):
            return ImportResult(success=False, error="JSON must be an array of objects")

        rows = [{str(k).strip(): v for k, v in item.items()} for item in parsed if isinstance(item, dict)]
        return ImportResult(success=True, rows=rows, raw_count=len(rows))
