"""Device Posture Hub — unified device inventory and risk scoring.

Merges per-device exports from an EDR agent, a cloud identity directory, an
MDM service, an IT asset system and an on-premises directory into one
de-duplicated inventory keyed by normalised hostname, scores every device,
and derives the fleet roll-ups a dashboard renders.

Pipeline: adapters -> merge engine -> risk engine -> aggregation -> query.
"""

from __future__ import annotations

from posture.aggregation import FleetSummary, build_summary
from posture.config import PostureConfig
from posture.merge_engine import MergeEngine
from posture.models import Device, DeviceStatus, Platform, RiskLevel
from posture.normalize import normalize_hostname
from posture.pipeline import InventoryReport, SourceSnapshot, run_pipeline
from posture.query import filter_devices, paginate
from posture.risk_engine import RiskEngine

__version__ = "1.0.0"

__all__ = [
    "Device",
    "DeviceStatus",
    "FleetSummary",
    "InventoryReport",
    "MergeEngine",
    "Platform",
    "PostureConfig",
    "RiskEngine",
    "RiskLevel",
    "SourceSnapshot",
    "build_summary",
    "filter_devices",
    "normalize_hostname",
    "paginate",
    "run_pipeline",
]
