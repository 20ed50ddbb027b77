"""On-premises directory computer export (e.g. ``Get-ADComputer | Export-Csv``)."""

from __future__ import annotations

from posture.adapters.base import BaseAdapter, Row
from posture.models import OnPremDetail, Platform


class OnPremAdapter(BaseAdapter):
    platform = Platform.ONPREM_DIRECTORY
    identity_columns = ("Name",)

    def build_detail(self, cells: Row) -> OnPremDetail:
        return OnPremDetail(
            enabled=self._value(cells, "Enabled"),
            operating_system=self._text(cells, "OperatingSystem"),
            os_version=self._text(cells, "OperatingSystemVersion"),
            last_logon=self._date(cells, "LastLogonDate"),
            created=self._date(cells, "whenCreated"),
            dns_host_name=self._text(cells, "DNSHostName"),
            distinguished_name=self._text(cells, "DistinguishedName"),
            description=self._text(cells, "Description"),
        )
