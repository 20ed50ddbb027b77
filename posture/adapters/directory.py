"""Cloud identity directory device export."""

from __future__ import annotations

from posture.adapters.base import BaseAdapter, Row
from posture.models import DirectoryDetail, Platform


class DirectoryAdapter(BaseAdapter):
    platform = Platform.DIRECTORY
    identity_columns = ("displayName",)

    def build_detail(self, cells: Row) -> DirectoryDetail:
        return DirectoryDetail(
            account_enabled=self._value(cells, "accountEnabled"),
            operating_system=self._text(cells, "operatingSystem"),
            os_version=self._text(cells, "operatingSystemVersion"),
            join_type=self._text(cells, "joinType (trustType)"),
            is_compliant=self._value(cells, "isCompliant"),
            is_managed=self._value(cells, "isManaged"),
            last_sign_in=self._date(cells, "approximateLastSignInDateTime"),
            registration_time=self._date(cells, "registrationTime"),
            device_id=self._text(cells, "deviceId"),
            user_names=self._text(cells, "userNames"),
            model=self._text(cells, "model"),
        )
