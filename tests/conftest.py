"""Shared fixtures: a fixed clock and a small five-source fleet."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from posture.config import PostureConfig
from posture.models import Platform
from posture.pipeline import SourceSnapshot, run_pipeline

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def days_ago(days: float) -> str:
    """ISO timestamp string ``days`` before ``NOW``, as exports deliver it."""
    return (NOW - timedelta(days=days)).strftime("%Y-%m-%dT%H:%M:%SZ")


def fleet_rows() -> dict[Platform, list[dict]]:
    return {
        Platform.EDR: [
            {
                "Hostname": "WS-100",
                "Last Seen": days_ago(1),
                "Detections Disabled": "Yes",
                "Platform": "Windows",
                "Manufacturer": "Dell",
                "Last Logged In User Account": "alice",
                "Last Reboot": days_ago(40),
            },
            {
                "Hostname": "ws 200",
                "Last Seen": days_ago(100),
                "Platform": "Mac",
                "Manufacturer": "Apple",
                "Detections Disabled": "No",
            },
        ],
        Platform.DIRECTORY: [
            {"displayName": "WS-100", "isCompliant": "true", "accountEnabled": "true", "operatingSystem": "Windows"},
            {
                "displayName": "laptop-300",
                "isCompliant": "False",
                "accountEnabled": False,
                "operatingSystem": "iOS",
                "approximateLastSignInDateTime": days_ago(10),
            },
        ],
        Platform.MDM: [
            {"Device name": "WS-200", "Compliance": "Compliant", "Encrypted": "Yes", "Last check-in": days_ago(2)},
            {
                "Device name": "phone-400",
                "Compliance": "Noncompliant",
                "Encrypted": "No",
                "Manufacturer": "Samsung",
                "Last check-in": days_ago(50),
            },
        ],
        Platform.ASSET_MGMT: [
            {"Name": "ws-100", "Department": "Finance", "Location": "HQ"},
            {"Name": "ws-200", "Department": "Finance"},
            {"Name": "printer-500", "Department": "Facilities"},
            {"Name": "", "Department": "Ghost"},
        ],
        Platform.ONPREM_DIRECTORY: [
            {"Name": "SRV-600", "Enabled": "False", "OperatingSystem": "Windows Server 2019", "LastLogonDate": days_ago(5)},
            {"Name": "laptop-300", "Enabled": "True"},
        ],
    }


@pytest.fixture
def config():
    return PostureConfig()


@pytest.fixture
def fleet_snapshot():
    return SourceSnapshot.from_rows(fleet_rows())


@pytest.fixture
def fleet_report(fleet_snapshot, config):
    return run_pipeline(fleet_snapshot, now=NOW, config=config)
