"""IT asset / ticketing system export."""

from __future__ import annotations

from posture.adapters.base import BaseAdapter, Row
from posture.models import AssetMgmtDetail, Platform


class AssetMgmtAdapter(BaseAdapter):
    platform = Platform.ASSET_MGMT
    identity_columns = ("Name",)

    def build_detail(self, cells: Row) -> AssetMgmtDetail:
        return AssetMgmtDetail(
            asset_type=self._text(cells, "Asset Type"),
            asset_tag=self._text(cells, "Asset Tag"),
            end_of_life=self._date(cells, "End of Life"),
            location=self._text(cells, "Location"),
            department=self._text(cells, "Department"),
            used_by=self._text(cells, "Used by (Name)"),
            managed_by=self._text(cells, "Managed by (Name)"),
            updated_at=self._date(cells, "Updated At"),
            model=self._text(cells, "Model"),
        )
