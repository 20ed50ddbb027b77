"""Tests for the ``posture`` command."""

from __future__ import annotations

import json

import pytest

from posture.cli import build_parser, main
from tests.conftest import days_ago


@pytest.fixture
def export_files(tmp_path):
    edr = tmp_path / "edr.csv"
    edr.write_text(
        "Hostname,Last Seen,Detections Disabled\n"
        f"ws-1,{days_ago(0)},No\n"
        f"ws-2,{days_ago(0)},Yes\n"
    )
    assets = tmp_path / "assets.json"
    assets.write_text(json.dumps([{"Name": "WS-1", "Department": "Finance"}, {"Name": "kiosk", "Department": "Lobby"}]))
    return edr, assets


class TestCli:
    def test_parser_has_flag_per_platform(self):
        args = build_parser().parse_args(["report", "--asset-mgmt", "a.csv", "--onprem", "ad.csv"])
        assert args.asset_mgmt.name == "a.csv"
        assert args.onprem_directory.name == "ad.csv"
        assert args.edr is None

    def test_report_json(self, export_files, capsys):
        edr, assets = export_files
        assert main(["report", "--edr", str(edr), "--asset-mgmt", str(assets), "--json"]) == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["total"] == 3
        assert payload["summary"]["coverage"]["AssetMgmt"] == 2
        assert {d["hostname"] for d in payload["devices"]} == {"ws-1", "ws-2", "kiosk"}

    def test_report_search(self, export_files, capsys):
        edr, assets = export_files
        main(["report", "--edr", str(edr), "--asset-mgmt", str(assets), "--json", "--search", "lobby"])
        payload = json.loads(capsys.readouterr().out)
        assert [d["hostname"] for d in payload["devices"]] == ["kiosk"]

    def test_report_tables(self, export_files):
        edr, assets = export_files
        assert main(["report", "--edr", str(edr), "--asset-mgmt", str(assets)]) == 0

    def test_report_without_files(self):
        assert main(["report"]) == 1

    def test_report_missing_file_exits(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["report", "--edr", str(tmp_path / "missing.csv")])
        assert exc.value.code == 1
