"""Endpoint-detection agent export (host inventory CSV)."""

from __future__ import annotations

from posture.adapters.base import BaseAdapter, Row
from posture.models import EdrDetail, Platform


class EdrAdapter(BaseAdapter):
    platform = Platform.EDR
    identity_columns = ("Hostname", "hostname")

    def build_detail(self, cells: Row) -> EdrDetail:
        return EdrDetail(
            last_seen=self._date(cells, "Last Seen"),
            first_seen=self._date(cells, "First Seen"),
            platform=self._text(cells, "Platform"),
            os_version=self._text(cells, "OS Version"),
            sensor_version=self._text(cells, "Sensor Version"),
            status=self._text(cells, "Status"),
            detections_disabled=self._text(cells, "Detections Disabled"),
            last_reboot=self._date(cells, "Last Reboot"),
            last_user=self._text(cells, "Last Logged In User Account"),
            serial_number=self._text(cells, "Serial Number"),
            manufacturer=self._text(cells, "Manufacturer"),
            model=self._text(cells, "Model"),
        )
