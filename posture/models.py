"""Data models for the unified device inventory.

Every platform contributes one typed detail record per device; the merged
``Device`` carries the resolved base fields plus whichever detail records
its sources produced.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Union


class Platform(str, Enum):
    """Reporting platforms, declared in merge processing order."""

    EDR = "EDR"
    DIRECTORY = "Directory"
    MDM = "MDM"
    ASSET_MGMT = "AssetMgmt"
    ONPREM_DIRECTORY = "OnPremDirectory"

    @property
    def slug(self) -> str:
        return _SLUGS[self]

    @classmethod
    def from_slug(cls, slug: str) -> Platform:
        """Resolve a URL/CLI slug (or enum value) to a platform."""
        key = slug.strip().lower()
        for platform, platform_slug in _SLUGS.items():
            if key in (platform_slug, platform.value.lower()):
                return platform
        raise ValueError(f"Unknown platform: {slug!r}")


_SLUGS = {
    Platform.EDR: "edr",
    Platform.DIRECTORY: "directory",
    Platform.MDM: "mdm",
    Platform.ASSET_MGMT: "asset-mgmt",
    Platform.ONPREM_DIRECTORY: "onprem",
}


class DeviceStatus(str, Enum):
    NO_EDR = "No EDR"
    DETECTIONS_DISABLED = "Detections disabled"
    NON_COMPLIANT = "Non-compliant"
    OK = "OK"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    ELEVATED = "elevated"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Per-platform detail records
# ---------------------------------------------------------------------------


@dataclass
class EdrDetail:
    """Endpoint agent record: protection and detection state."""

    last_seen: datetime | None = None
    first_seen: datetime | None = None
    platform: str | None = None
    os_version: str | None = None
    sensor_version: str | None = None
    status: str | None = None
    detections_disabled: str | None = None  # "Yes" | "No"
    last_reboot: datetime | None = None
    last_user: str | None = None
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None

    @property
    def is_detections_disabled(self) -> bool:
        return self.detections_disabled == "Yes"


@dataclass
class DirectoryDetail:
    """Cloud directory record: enablement, compliance and sign-in."""

    account_enabled: Any = None  # bool or "true"/"false"
    operating_system: str | None = None
    os_version: str | None = None
    join_type: str | None = None
    is_compliant: Any = None
    is_managed: Any = None
    last_sign_in: datetime | None = None
    registration_time: datetime | None = None
    device_id: str | None = None
    user_names: str | None = None
    model: str | None = None


@dataclass
class MdmDetail:
    """Device-management record: encryption, compliance and check-in."""

    last_check_in: datetime | None = None
    enrollment_date: datetime | None = None
    os_version: str | None = None
    compliance: str | None = None  # "Compliant" | "Noncompliant" | ...
    encrypted: str | None = None  # "Yes" | "No"
    ownership: str | None = None
    managed_by: str | None = None
    primary_user: str | None = None
    device_state: str | None = None
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None

    @property
    def is_non_compliant(self) -> bool:
        return self.compliance == "Noncompliant"

    @property
    def is_unencrypted(self) -> bool:
        return self.encrypted == "No"

    @property
    def is_encrypted(self) -> bool:
        return self.encrypted == "Yes"


@dataclass
class AssetMgmtDetail:
    """Asset/ticketing record; the only source of department and location."""

    asset_type: str | None = None
    asset_tag: str | None = None
    end_of_life: datetime | None = None
    location: str | None = None
    department: str | None = None
    used_by: str | None = None
    managed_by: str | None = None
    updated_at: datetime | None = None
    model: str | None = None


@dataclass
class OnPremDetail:
    """On-premises directory computer account."""

    enabled: Any = None
    operating_system: str | None = None
    os_version: str | None = None
    last_logon: datetime | None = None
    created: datetime | None = None
    dns_host_name: str | None = None
    distinguished_name: str | None = None
    description: str | None = None


SourceDetail = Union[EdrDetail, DirectoryDetail, MdmDetail, AssetMgmtDetail, OnPremDetail]

DETAIL_TYPES: dict[Platform, type] = {
    Platform.EDR: EdrDetail,
    Platform.DIRECTORY: DirectoryDetail,
    Platform.MDM: MdmDetail,
    Platform.ASSET_MGMT: AssetMgmtDetail,
    Platform.ONPREM_DIRECTORY: OnPremDetail,
}

# Device attribute holding each platform's detail record
DETAIL_ATTRS: dict[Platform, str] = {
    Platform.EDR: "edr",
    Platform.DIRECTORY: "directory",
    Platform.MDM: "mdm",
    Platform.ASSET_MGMT: "asset_mgmt",
    Platform.ONPREM_DIRECTORY: "onprem",
}


# ---------------------------------------------------------------------------
# Unified device
# ---------------------------------------------------------------------------


@dataclass
class Device:
    """One device, unified across every platform that reported it."""

    hostname: str
    sources: list[Platform] = field(default_factory=list)
    serial_number: str | None = None
    manufacturer: str | None = None
    model: str | None = None
    last_seen: datetime | None = None
    user: str | None = None
    department: str | None = None
    location: str | None = None
    risk_score: int | None = None

    edr: EdrDetail | None = None
    directory: DirectoryDetail | None = None
    mdm: MdmDetail | None = None
    asset_mgmt: AssetMgmtDetail | None = None
    onprem: OnPremDetail | None = None

    def add_source(self, platform: Platform) -> None:
        if platform not in self.sources:
            self.sources.append(platform)

    def has_source(self, platform: Platform) -> bool:
        return platform in self.sources

    def detail(self, platform: Platform) -> SourceDetail | None:
        return getattr(self, DETAIL_ATTRS[platform])

    def set_detail(self, platform: Platform, detail: SourceDetail) -> None:
        if not isinstance(detail, DETAIL_TYPES[platform]):
            raise TypeError(f"{type(detail).__name__} is not a {platform.value} detail")
        setattr(self, DETAIL_ATTRS[platform], detail)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hostname": self.hostname,
            "sources": [p.value for p in self.sources],
            "serial_number": self.serial_number,
            "manufacturer": self.manufacturer,
            "model": self.model,
            "last_seen": _iso(self.last_seen),
            "user": self.user,
            "department": self.department,
            "location": self.location,
            "risk_score": self.risk_score,
            "details": {
                platform.value: _detail_to_dict(self.detail(platform))
                for platform in Platform
                if self.detail(platform) is not None
            },
        }


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _detail_to_dict(detail: SourceDetail | None) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for key, value in vars(detail).items():
        out[key] = _iso(value) if isinstance(value, datetime) else value
    return out
