"""Risk engine — additive per-device risk score, risk level and status label."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from datetime import datetime
from typing import TYPE_CHECKING

from posture import predicates
from posture.models import Device, DeviceStatus, RiskLevel

if TYPE_CHECKING:
    from posture.config import PostureConfig

logger = logging.getLogger(__name__)


class RiskEngine:
    """Scores merged devices against the fixed rule table."""

    def __init__(self, config: PostureConfig) -> None:
        self.config = config

    # ------------------------------------------------------------------
    # Risk score
    # ------------------------------------------------------------------

    def calculate_risk_score(self, device: Device, now: datetime) -> int:
        """Calculate a 0-100 risk score from the device's merged state."""
        cfg = self.config
        score = 0
        if not predicates.has_edr(device):
            score += cfg.risk_no_edr_points
        if predicates.detections_disabled(device):
            score += cfg.risk_detections_disabled_points
        if predicates.is_non_compliant(device):
            score += cfg.risk_non_compliant_points
        if predicates.is_unencrypted(device):
            score += cfg.risk_unencrypted_points
        if predicates.is_stale(device, now, cfg.risk_stale_days):
            score += cfg.risk_stale_points
        return max(0, min(score, 100))

    def score_devices(self, devices: Iterable[Device], now: datetime) -> list[Device]:
        """Return scored copies; the merged devices are left untouched."""
        return [
            replace(d, sources=list(d.sources), risk_score=self.calculate_risk_score(d, now)) for d in devices
        ]

    @staticmethod
    def risk_level_from_score(score: int) -> RiskLevel:
        if score >= 50:
            return RiskLevel.HIGH
        if score >= 30:
            return RiskLevel.ELEVATED
        if score >= 15:
            return RiskLevel.MEDIUM
        return RiskLevel.LOW

    # ------------------------------------------------------------------
    # Status label
    # ------------------------------------------------------------------

    @staticmethod
    def device_status(device: Device) -> DeviceStatus:
        """Most severe single finding for the device table."""
        if not predicates.has_edr(device):
            return DeviceStatus.NO_EDR
        if predicates.detections_disabled(device):
            return DeviceStatus.DETECTIONS_DISABLED
        if predicates.is_non_compliant(device):
            return DeviceStatus.NON_COMPLIANT
        return DeviceStatus.OK
