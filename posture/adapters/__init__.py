"""Source adapters: one per reporting platform, plus the file decoder.

Each adapter maps a raw export row to a ``SourceFact`` (canonical hostname +
typed detail record) or drops it when the identity column is empty.
"""

from __future__ import annotations

from posture.adapters.asset_mgmt import AssetMgmtAdapter
from posture.adapters.base import BaseAdapter, SourceFact, SourceFacts
from posture.adapters.directory import DirectoryAdapter
from posture.adapters.edr import EdrAdapter
from posture.adapters.file_import import FileImportAdapter, ImportResult
from posture.adapters.mdm import MdmAdapter
from posture.adapters.onprem import OnPremAdapter
from posture.models import Platform

_ADAPTERS: dict[Platform, BaseAdapter] = {
    Platform.EDR: EdrAdapter(),
    Platform.DIRECTORY: DirectoryAdapter(),
    Platform.MDM: MdmAdapter(),
    Platform.ASSET_MGMT: AssetMgmtAdapter(),
    Platform.ONPREM_DIRECTORY: OnPremAdapter(),
}


def get_adapter(platform: Platform) -> BaseAdapter:
    """Return the adapter for ``platform``; unknown tags raise ``KeyError``."""
    return _ADAPTERS[platform]


__all__ = [
    "AssetMgmtAdapter",
    "BaseAdapter",
    "DirectoryAdapter",
    "EdrAdapter",
    "FileImportAdapter",
    "ImportResult",
    "MdmAdapter",
    "OnPremAdapter",
    "SourceFact",
    "SourceFacts",
    "get_adapter",
]
