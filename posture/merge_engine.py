"""Merge engine — folds per-source facts into one Device per canonical hostname.

Responsibilities:
1. Process platforms in a fixed order (EDR, Directory, MDM, AssetMgmt,
   OnPremDirectory), rows in their original order.
2. Create a Device the first time a hostname is seen.
3. Record the platform tag (set semantics) and attach the platform's detail
   record, replacing any earlier one from the same platform.
4. Resolve base fields through the precedence tables below.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from functools import reduce

from posture.adapters.base import SourceFact, SourceFacts
from posture.models import Device, Platform
from posture.normalize import is_blank

logger = logging.getLogger(__name__)

_PLATFORM_ORDER = {platform: index for index, platform in enumerate(Platform)}

# (device field, detail field) pairs
_OVERWRITE: dict[Platform, tuple[tuple[str, str], ...]] = {
    Platform.EDR: (("last_seen", "last_seen"), ("user", "last_user")),
    Platform.ASSET_MGMT: (("department", "department"), ("location", "location")),
}

_FILL_IF_EMPTY: dict[Platform, tuple[tuple[str, str], ...]] = {
    Platform.EDR: (
        ("serial_number", "serial_number"),
        ("manufacturer", "manufacturer"),
        ("model", "model"),
    ),
    Platform.DIRECTORY: (
        ("last_seen", "last_sign_in"),
        ("user", "user_names"),
        ("model", "model"),
    ),
    Platform.MDM: (
        ("last_seen", "last_check_in"),
        ("user", "primary_user"),
        ("serial_number", "serial_number"),
        ("manufacturer", "manufacturer"),
        ("model", "model"),
    ),
    Platform.ASSET_MGMT: (
        ("user", "used_by"),
        ("model", "model"),
    ),
    Platform.ONPREM_DIRECTORY: (("last_seen", "last_logon"),),
}


class MergeEngine:
    """Builds the unified device map from adapter output."""

    def merge(self, facts_by_source: Iterable[SourceFacts]) -> dict[str, Device]:
        """Fold every source's facts into a fresh hostname -> Device map.

        The input order of ``facts_by_source`` does not matter; platforms are
        always applied in processing order.
        """
        ordered = sorted(facts_by_source, key=lambda sf: _PLATFORM_ORDER[sf.platform])
        facts = (fact for source in ordered for fact in source.facts)
        devices = reduce(self.merge_fact, facts, {})
        logger.debug("Merged %d sources into %d devices", len(ordered), len(devices))
        return devices

    @staticmethod
    def merge_fact(devices: dict[str, Device], fact: SourceFact) -> dict[str, Device]:
        """Apply one fact to the accumulator map and return it."""
        device = devices.get(fact.hostname)
        if device is None:
            device = Device(hostname=fact.hostname)
            devices[fact.hostname] = device

        device.add_source(fact.platform)
        device.set_detail(fact.platform, fact.detail)

        for device_field, detail_field in _OVERWRITE.get(fact.platform, ()):
            setattr(device, device_field, getattr(fact.detail, detail_field))

        for device_field, detail_field in _FILL_IF_EMPTY.get(fact.platform, ()):
            value = getattr(fact.detail, detail_field)
            if is_blank(getattr(device, device_field)) and not is_blank(value):
                setattr(device, device_field, value)

        return devices
