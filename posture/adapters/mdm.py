"""Mobile-device-management export."""

from __future__ import annotations

from posture.adapters.base import BaseAdapter, Row
from posture.models import MdmDetail, Platform


class MdmAdapter(BaseAdapter):
    platform = Platform.MDM
    identity_columns = ("Device name",)

    def build_detail(self, cells: Row) -> MdmDetail:
        return MdmDetail(
            last_check_in=self._date(cells, "Last check-in"),
            enrollment_date=self._date(cells, "Enrollment date"),
            os_version=self._text(cells, "OS version"),
            compliance=self._text(cells, "Compliance"),
            encrypted=self._text(cells, "Encrypted"),
            ownership=self._text(cells, "Ownership"),
            managed_by=self._text(cells, "Managed by"),
            primary_user=self._text(cells, "Primary user UPN", "Primary user display name"),
            device_state=self._text(cells, "Device state"),
            serial_number=self._text(cells, "Serial number"),
            manufacturer=self._text(cells, "Manufacturer"),
            model=self._text(cells, "Model"),
        )
