"""Aggregation engine — fleet-wide roll-ups over the scored device collection.

Every function here is pure and only reads devices; none depends on the
order of the input collection except where ties are broken by first
appearance (manufacturer table, department table).
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from posture import predicates
from posture.models import Device, Platform, RiskLevel
from posture.risk_engine import RiskEngine

if TYPE_CHECKING:
    from posture.config import PostureConfig

UNASSIGNED_DEPARTMENT = "Unassigned"
UNKNOWN_LABEL = "Unknown"


@dataclass
class StalenessBuckets:
    """Devices with known activity, split at one threshold."""

    days: int
    active: int = 0
    stale: int = 0


@dataclass
class OsClassStats:
    total: int = 0
    active: int = 0


@dataclass
class DepartmentStats:
    name: str
    total: int = 0
    protected: int = 0
    compliant: int = 0
    encrypted: int = 0
    stale: int = 0
    high_risk: int = 0
    protection_rate: int = 0
    compliance_rate: int = 0
    encryption_rate: int = 0


@dataclass
class DisabledMetrics:
    total: int = 0
    directory: int = 0
    onprem: int = 0
    recently_active: int = 0
    reporting_to_edr: int = 0


@dataclass
class Alert:
    type: str  # critical | warning
    message: str
    hostname: str


@dataclass
class FleetSummary:
    """Everything the presentation layer renders besides the device table."""

    generated_at: datetime
    total_devices: int = 0
    coverage: dict[str, int] = field(default_factory=dict)
    unprotected: int = 0
    non_compliant: int = 0
    detections_disabled: int = 0
    unencrypted: int = 0
    unassigned: int = 0
    needs_reboot: int = 0
    high_risk: int = 0
    stale_short: StalenessBuckets | None = None
    stale_long: StalenessBuckets | None = None
    risk_levels: dict[str, int] = field(default_factory=dict)
    compliance: dict[str, int] = field(default_factory=dict)
    os_breakdown: dict[str, OsClassStats] = field(default_factory=dict)
    os_distribution: list[tuple[str, int]] = field(default_factory=list)
    manufacturers: list[tuple[str, int]] = field(default_factory=list)
    departments: list[DepartmentStats] = field(default_factory=list)
    disabled: DisabledMetrics = field(default_factory=DisabledMetrics)
    alerts: list[Alert] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat()
        data["os_distribution"] = [{"name": n, "value": v} for n, v in self.os_distribution]
        data["manufacturers"] = [{"name": n, "value": v} for n, v in self.manufacturers]
        return data


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


def percent(part: int, total: int) -> int:
    """Whole-number percentage, rounding halves up."""
    if total <= 0:
        return 0
    return (part * 200 + total) // (2 * total)


def is_high_risk(device: Device, config: PostureConfig) -> bool:
    return device.risk_score is not None and device.risk_score >= config.high_risk_threshold


def coverage(devices: Sequence[Device]) -> dict[Platform, int]:
    return {platform: sum(1 for d in devices if d.has_source(platform)) for platform in Platform}


def staleness(devices: Sequence[Device], now: datetime, days: int) -> StalenessBuckets:
    return StalenessBuckets(
        days=days,
        active=sum(1 for d in devices if predicates.is_active(d, now, days)),
        stale=sum(1 for d in devices if predicates.is_stale(d, now, days)),
    )


def risk_level_counts(devices: Sequence[Device]) -> dict[RiskLevel, int]:
    counts = {level: 0 for level in RiskLevel}
    for device in devices:
        if device.risk_score is not None:
            counts[RiskEngine.risk_level_from_score(device.risk_score)] += 1
    return counts


def compliance_breakdown(devices: Sequence[Device]) -> dict[str, int]:
    non_compliant = sum(1 for d in devices if predicates.is_non_compliant(d))
    compliant = sum(1 for d in devices if predicates.is_compliant(d))
    return {
        "compliant": compliant,
        "non_compliant": non_compliant,
        "unknown": len(devices) - compliant - non_compliant,
    }


# ---------------------------------------------------------------------------
# Distributions
# ---------------------------------------------------------------------------


def os_breakdown(devices: Sequence[Device], now: datetime, active_days: int) -> dict[str, OsClassStats]:
    stats = {os_class: OsClassStats() for os_class in predicates.OS_CLASSES}
    for device in devices:
        entry = stats[predicates.os_class(device)]
        entry.total += 1
        if predicates.is_active(device, now, active_days):
            entry.active += 1
    return stats


def os_distribution(devices: Sequence[Device]) -> list[tuple[str, int]]:
    counts = Counter(predicates.os_label(d) or UNKNOWN_LABEL for d in devices)
    return list(counts.items())


def manufacturer_distribution(devices: Sequence[Device], top: int) -> list[tuple[str, int]]:
    counts = Counter(d.manufacturer or UNKNOWN_LABEL for d in devices)
    # sorted() is stable, so equal counts keep first-seen order
    return sorted(counts.items(), key=lambda item: -item[1])[:top]


# ---------------------------------------------------------------------------
# Departments
# ---------------------------------------------------------------------------


def department_stats(devices: Sequence[Device], now: datetime, config: PostureConfig) -> list[DepartmentStats]:
    groups: dict[str, DepartmentStats] = {}
    for device in devices:
        name = device.department or UNASSIGNED_DEPARTMENT
        stats = groups.setdefault(name, DepartmentStats(name=name))
        stats.total += 1
        if predicates.has_edr(device):
            stats.protected += 1
        if predicates.is_compliant(device):
            stats.compliant += 1
        if predicates.is_encrypted(device):
            stats.encrypted += 1
        if predicates.is_stale(device, now, config.stale_days_short):
            stats.stale += 1
        if is_high_risk(device, config):
            stats.high_risk += 1

    for stats in groups.values():
        stats.protection_rate = percent(stats.protected, stats.total)
        stats.compliance_rate = percent(stats.compliant, stats.total)
        stats.encryption_rate = percent(stats.encrypted, stats.total)

    return sorted(groups.values(), key=lambda s: -s.total)


# ---------------------------------------------------------------------------
# Disabled accounts
# ---------------------------------------------------------------------------


def disabled_metrics(devices: Sequence[Device], now: datetime, active_days: int) -> DisabledMetrics:
    metrics = DisabledMetrics()
    for device in devices:
        in_directory = predicates.is_disabled_in_directory(device)
        on_prem = predicates.is_disabled_on_prem(device)
        if not (in_directory or on_prem):
            continue
        metrics.total += 1
        metrics.directory += int(in_directory)
        metrics.onprem += int(on_prem)
        if predicates.is_active(device, now, active_days):
            metrics.recently_active += 1
        if predicates.has_edr(device):
            metrics.reporting_to_edr += 1
    return metrics


# ---------------------------------------------------------------------------
# Alerts
# ---------------------------------------------------------------------------


def build_alerts(devices: Sequence[Device], now: datetime, config: PostureConfig) -> list[Alert]:
    sample = config.alert_sample_size
    stale = [d for d in devices if predicates.is_stale(d, now, config.stale_days_long)]
    unprotected = [d for d in devices if predicates.is_unprotected(d)][:sample]
    disabled = [d for d in devices if predicates.detections_disabled(d)]
    high_risk = [d for d in devices if is_high_risk(d, config)][:sample]

    alerts = [
        *(Alert("critical", f"{d.hostname} not seen in {config.stale_days_long}+ days", d.hostname) for d in stale),
        *(Alert("warning", f"{d.hostname} missing EDR protection", d.hostname) for d in unprotected),
        *(Alert("critical", f"{d.hostname} has detections disabled", d.hostname) for d in disabled),
        *(Alert("critical", f"{d.hostname} high risk score ({d.risk_score})", d.hostname) for d in high_risk),
    ]
    return alerts[: config.max_alerts]


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------


def build_summary(devices: Sequence[Device], now: datetime, config: PostureConfig) -> FleetSummary:
    """Compute every roll-up for one scored collection."""
    return FleetSummary(
        generated_at=now,
        total_devices=len(devices),
        coverage={platform.value: count for platform, count in coverage(devices).items()},
        unprotected=sum(1 for d in devices if predicates.is_unprotected(d)),
        non_compliant=sum(1 for d in devices if predicates.is_non_compliant(d)),
        detections_disabled=sum(1 for d in devices if predicates.detections_disabled(d)),
        unencrypted=sum(1 for d in devices if predicates.is_unencrypted(d)),
        unassigned=sum(1 for d in devices if predicates.is_unassigned(d)),
        needs_reboot=sum(1 for d in devices if predicates.needs_reboot(d, now, config.reboot_days)),
        high_risk=sum(1 for d in devices if is_high_risk(d, config)),
        stale_short=staleness(devices, now, config.stale_days_short),
        stale_long=staleness(devices, now, config.stale_days_long),
        risk_levels={level.value: count for level, count in risk_level_counts(devices).items()},
        compliance=compliance_breakdown(devices),
        os_breakdown=os_breakdown(devices, now, config.os_active_days),
        os_distribution=os_distribution(devices),
        manufacturers=manufacturer_distribution(devices, config.top_manufacturers),
        departments=department_stats(devices, now, config),
        disabled=disabled_metrics(devices, now, config.disabled_active_days),
        alerts=build_alerts(devices, now, config),
    )
