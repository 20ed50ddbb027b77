"""Posture module configuration and scoring thresholds."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class PostureConfig:
    """Thresholds, risk points and limits for the posture pipeline."""

    # Risk engine points
    risk_no_edr_points: int = 30
    risk_detections_disabled_points: int = 25
    risk_non_compliant_points: int = 20
    risk_unencrypted_points: int = 15
    risk_stale_points: int = 10

    # Staleness windows (days)
    risk_stale_days: int = 90
    stale_days_short: int = 30
    stale_days_long: int = 90
    os_active_days: int = 45
    disabled_active_days: int = 30
    reboot_days: int = 30

    high_risk_threshold: int = 50

    # Summary shaping
    top_manufacturers: int = 8
    max_alerts: int = 10
    alert_sample_size: int = 5

    # Device table paging
    page_size: int = 50
    max_page_size: int = 500

    # Allowed import file extensions
    allowed_import_extensions: list[str] = field(
        default_factory=lambda: [".csv", ".json"],
    )

    # Max import file size (bytes)
    max_import_file_size: int = 10 * 1024 * 1024  # 10 MB

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> PostureConfig:
        """Load configuration from environment variables."""

        def _int(key: str, default: int) -> int:
            try:
                return int(os.getenv(key, str(default)))
            except ValueError:
                return default

        return cls(
            risk_no_edr_points=_int("POSTURE_RISK_NO_EDR", 30),
            risk_detections_disabled_points=_int("POSTURE_RISK_DETECTIONS_DISABLED", 25),
            risk_non_compliant_points=_int("POSTURE_RISK_NON_COMPLIANT", 20),
            risk_unencrypted_points=_int("POSTURE_RISK_UNENCRYPTED", 15),
            risk_stale_points=_int("POSTURE_RISK_STALE", 10),
            risk_stale_days=_int("POSTURE_RISK_STALE_DAYS", 90),
            stale_days_short=_int("POSTURE_STALE_DAYS_SHORT", 30),
            stale_days_long=_int("POSTURE_STALE_DAYS_LONG", 90),
            os_active_days=_int("POSTURE_OS_ACTIVE_DAYS", 45),
            disabled_active_days=_int("POSTURE_DISABLED_ACTIVE_DAYS", 30),
            reboot_days=_int("POSTURE_REBOOT_DAYS", 30),
            high_risk_threshold=_int("POSTURE_HIGH_RISK_THRESHOLD", 50),
            page_size=_int("POSTURE_PAGE_SIZE", 50),
            max_page_size=_int("POSTURE_MAX_PAGE_SIZE", 500),
            max_import_file_size=_int("POSTURE_MAX_IMPORT_BYTES", 10 * 1024 * 1024),
            log_level=os.getenv("POSTURE_LOG_LEVEL", "INFO").upper(),
        )
