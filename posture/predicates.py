"""Device predicates shared by the risk engine and the aggregations."""

from __future__ import annotations

from datetime import datetime

from posture.models import Device, Platform
from posture.normalize import days_since, is_false

OS_CLASSES = ("Windows", "macOS", "iOS", "Android", "Unknown")

# Checked in order; first keyword hit wins
_OS_KEYWORDS = (
    ("Windows", ("windows",)),
    ("macOS", ("mac", "darwin")),
    ("iOS", ("ios", "iphone", "ipad")),
    ("Android", ("android",)),
)


def has_edr(device: Device) -> bool:
    return device.has_source(Platform.EDR)


def is_unprotected(device: Device) -> bool:
    """Known to the directory or MDM but not running the EDR agent."""
    managed = device.has_source(Platform.DIRECTORY) or device.has_source(Platform.MDM)
    return managed and not has_edr(device)


def detections_disabled(device: Device) -> bool:
    return device.edr is not None and device.edr.is_detections_disabled


def is_non_compliant(device: Device) -> bool:
    directory_flag = device.directory is not None and is_false(device.directory.is_compliant)
    mdm_flag = device.mdm is not None and device.mdm.is_non_compliant
    return directory_flag or mdm_flag


def is_compliant(device: Device) -> bool:
    """Has compliance evidence from at least one system and no violation."""
    has_evidence = device.directory is not None or device.mdm is not None
    return has_evidence and not is_non_compliant(device)


def is_unencrypted(device: Device) -> bool:
    return device.mdm is not None and device.mdm.is_unencrypted


def is_encrypted(device: Device) -> bool:
    return device.mdm is not None and device.mdm.is_encrypted


def is_stale(device: Device, now: datetime, days: int) -> bool:
    """Last seen more than ``days`` ago. Unknown activity is never stale."""
    return device.last_seen is not None and days_since(device.last_seen, now) > days


def is_active(device: Device, now: datetime, days: int) -> bool:
    """Last seen within ``days``. Unknown activity is never active."""
    return device.last_seen is not None and days_since(device.last_seen, now) <= days


def is_unassigned(device: Device) -> bool:
    return not device.user


def needs_reboot(device: Device, now: datetime, days: int) -> bool:
    if device.edr is None or device.edr.last_reboot is None:
        return False
    return days_since(device.edr.last_reboot, now) > days


def is_disabled_in_directory(device: Device) -> bool:
    return device.directory is not None and is_false(device.directory.account_enabled)


def is_disabled_on_prem(device: Device) -> bool:
    return device.onprem is not None and is_false(device.onprem.enabled)


def is_disabled(device: Device) -> bool:
    return is_disabled_in_directory(device) or is_disabled_on_prem(device)


def os_label(device: Device) -> str | None:
    """Reported OS name: EDR platform, then cloud directory, then on-prem."""
    if device.edr is not None and device.edr.platform:
        return device.edr.platform
    if device.directory is not None and device.directory.operating_system:
        return device.directory.operating_system
    if device.onprem is not None and device.onprem.operating_system:
        return device.onprem.operating_system
    return None


def classify_os(label: str | None) -> str:
    if not label:
        return "Unknown"
    lowered = label.lower()
    for os_class, keywords in _OS_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return os_class
    return "Unknown"


def os_class(device: Device) -> str:
    return classify_os(os_label(device))
