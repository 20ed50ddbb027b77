"""Tests for the posture REST API and the upload session."""

from __future__ import annotations

import io

import pytest
from flask import Flask

from posture.config import PostureConfig
from posture.models import Platform
from posture.session import InventorySession
from tests.conftest import NOW, days_ago

EDR_CSV = (
    "Hostname,Last Seen,Detections Disabled,Last Logged In User Account\n"
    f"WS-100,{days_ago(1)},Yes,alice\n"
    f"ws-101,{days_ago(2)},No,bob\n"
).encode()

ASSET_CSV = b"Name,Department,Location\nws-100,Finance,HQ\nprinter-9,Facilities,Annex\n,Nowhere,\n"


# ===================================================================
# InventorySession
# ===================================================================
class TestInventorySession:
    def test_no_report_before_upload(self):
        session = InventorySession(PostureConfig())
        assert session.report is None
        assert all(status is None for status in session.source_status().values())

    def test_upload_replaces_platform_rows(self):
        session = InventorySession(PostureConfig())
        first = session.upload(Platform.EDR, [{"Hostname": "a"}, {"Hostname": "b"}], "edr.csv", now=NOW)
        second = session.upload(Platform.EDR, [{"Hostname": "c"}], "edr2.csv", now=NOW)

        assert [d.hostname for d in first.devices] == ["a", "b"]
        assert [d.hostname for d in second.devices] == ["c"]
        assert session.report is second
        status = session.source_status()[Platform.EDR]
        assert (status.filename, status.row_count) == ("edr2.csv", 1)

    def test_sources_combine(self):
        session = InventorySession(PostureConfig())
        session.upload(Platform.EDR, [{"Hostname": "a"}], "edr.csv", now=NOW)
        report = session.upload(Platform.ASSET_MGMT, [{"Name": "A", "Department": "IT"}], "assets.csv", now=NOW)
        (device,) = report.devices
        assert device.sources == [Platform.EDR, Platform.ASSET_MGMT]
        assert device.department == "IT"

    def test_clear_last_source_drops_report(self):
        session = InventorySession(PostureConfig())
        session.upload(Platform.MDM, [{"Device name": "m"}], "mdm.csv", now=NOW)
        assert session.clear(Platform.MDM) is None
        assert session.report is None
        assert session.source_status()[Platform.MDM] is None

    def test_report_at_does_not_store(self):
        session = InventorySession(PostureConfig())
        stored = session.upload(Platform.EDR, [{"Hostname": "a", "Last Seen": days_ago(1)}], "edr.csv", now=NOW)
        later = session.report_at(NOW.replace(year=NOW.year + 1))
        assert later.devices[0].risk_score == 10
        assert session.report is stored


# ===================================================================
# API endpoints
# ===================================================================
class TestPostureAPI:
    @pytest.fixture
    def client(self):
        import posture.api as api_module

        app = Flask(__name__)
        app.config["TESTING"] = True
        api_module._config = PostureConfig()
        api_module._session = None
        app.register_blueprint(api_module.posture_bp)
        return app.test_client()

    @staticmethod
    def _upload(client, slug: str, data: bytes, filename: str):
        return client.post(
            f"/api/posture/sources/{slug}",
            data={"file": (io.BytesIO(data), filename)},
            content_type="multipart/form-data",
        )

    def test_health(self, client):
        resp = client.get("/api/posture/health")
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["module"] == "posture"
        assert "asset-mgmt" in data["platforms"]

    def test_summary_empty(self, client):
        resp = client.get("/api/posture/summary")
        assert resp.status_code == 200
        assert resp.get_json()["summary"] is None

    def test_upload_and_summary(self, client):
        resp = self._upload(client, "edr", EDR_CSV, "hosts.csv")
        assert resp.status_code == 201
        assert resp.get_json()["total_devices"] == 2

        resp = self._upload(client, "asset-mgmt", ASSET_CSV, "assets.csv")
        assert resp.status_code == 201
        body = resp.get_json()
        assert body["dropped"] == 1
        assert body["total_devices"] == 3

        summary = client.get("/api/posture/summary").get_json()["summary"]
        assert summary["total_devices"] == 3
        assert summary["coverage"]["EDR"] == 2
        assert summary["detections_disabled"] == 1
        assert {d["name"] for d in summary["departments"]} == {"Finance", "Facilities", "Unassigned"}

    def test_summary_with_explicit_now(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        resp = client.get("/api/posture/summary?now=2030-01-01T00:00:00Z")
        assert resp.status_code == 200
        assert resp.get_json()["summary"]["stale_long"]["stale"] == 2

    def test_summary_rejects_bad_now(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        resp = client.get("/api/posture/summary?now=yesterday-ish")
        assert resp.status_code == 400

    def test_sources_listing(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        sources = {s["slug"]: s for s in client.get("/api/posture/sources").get_json()["sources"]}
        assert sources["edr"]["filename"] == "hosts.csv"
        assert sources["edr"]["row_count"] == 2
        assert sources["mdm"]["filename"] is None

    def test_upload_unknown_platform(self, client):
        resp = self._upload(client, "carrier-pigeon", EDR_CSV, "hosts.csv")
        assert resp.status_code == 404

    def test_upload_requires_file(self, client):
        resp = client.post("/api/posture/sources/edr")
        assert resp.status_code == 400

    def test_upload_rejects_extension(self, client):
        resp = self._upload(client, "edr", b"<xml/>", "hosts.xml")
        assert resp.status_code == 400
        assert "Unsupported" in resp.get_json()["error"]

    def test_upload_rejects_oversized_file(self, client):
        import posture.api as api_module

        api_module._config.max_import_file_size = 10
        resp = self._upload(client, "edr", EDR_CSV, "hosts.csv")
        assert resp.status_code == 413

    def test_upload_rejects_bad_json(self, client):
        resp = self._upload(client, "directory", b'{"key": 1}', "devices.json")
        assert resp.status_code == 400

    def test_device_list_search_and_paging(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        data = client.get("/api/posture/devices?q=BOB").get_json()
        assert data["total"] == 1
        assert data["devices"][0]["hostname"] == "ws-101"
        assert data["devices"][0]["status"] == "OK"

        data = client.get("/api/posture/devices?page=99&page_size=1").get_json()
        assert data["page"] == 2
        assert data["pages"] == 2
        assert len(data["devices"]) == 1

    def test_device_detail_uses_normalised_hostname(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        resp = client.get("/api/posture/devices/WS%20100")
        assert resp.status_code == 200
        device = resp.get_json()["device"]
        assert device["risk_score"] == 25
        assert device["risk_level"] == "medium"
        assert device["status"] == "Detections disabled"

    def test_device_detail_not_found(self, client):
        resp = client.get("/api/posture/devices/nope")
        assert resp.status_code == 404

    def test_clear_source(self, client):
        self._upload(client, "edr", EDR_CSV, "hosts.csv")
        resp = client.delete("/api/posture/sources/edr")
        assert resp.status_code == 200
        assert resp.get_json()["total_devices"] == 0
        assert client.get("/api/posture/summary").get_json()["summary"] is None
