"""``posture`` command: build the unified inventory from export files.

    posture report --edr hosts.csv --directory devices.json --mdm intune.csv
    posture serve --port 5000
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from posture.adapters.file_import import FileImportAdapter
from posture.aggregation import FleetSummary
from posture.config import PostureConfig
from posture.models import Device, Platform
from posture.pipeline import SourceSnapshot, run_pipeline
from posture.query import clamp_page, filter_devices, page_count, paginate
from posture.risk_engine import RiskEngine

logger = logging.getLogger("posture")

console = Console()

_RISK_STYLES = {"low": "green", "medium": "yellow", "elevated": "dark_orange", "high": "bold red"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="posture", description="Unified device inventory and risk report")
    sub = parser.add_subparsers(dest="command", required=True)

    report = sub.add_parser("report", help="Merge export files and print the inventory")
    for platform in Platform:
        report.add_argument(f"--{platform.slug}", dest=platform.name.lower(), metavar="PATH", type=Path)
    report.add_argument("--search", default="", help="Filter by hostname, user or department")
    report.add_argument("--page", type=int, default=1)
    report.add_argument("--page-size", type=int, default=None)
    report.add_argument("--json", action="store_true", help="Print JSON instead of tables")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=5000)
    return parser


def load_snapshot(args: argparse.Namespace) -> SourceSnapshot:
    """Decode every file given on the command line; exits on a bad file."""
    importer = FileImportAdapter()
    rows = {}
    for platform in Platform:
        path: Path | None = getattr(args, platform.name.lower())
        if path is None:
            continue
        try:
            data = path.read_bytes()
        except OSError as exc:
            console.print(f"[red]Cannot read {path}: {exc}[/red]")
            sys.exit(1)
        result = importer.parse_file(data, path.name)
        if not result.success:
            console.print(f"[red]{platform.value} file {path.name}: {result.error}[/red]")
            sys.exit(1)
        logger.info("Loaded %d %s rows from %s", result.raw_count, platform.value, path)
        rows[platform] = result.rows
    return SourceSnapshot.from_rows(rows)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_overview(summary: FleetSummary) -> Table:
    table = Table(title="Fleet Overview")
    table.add_column("Metric", style="cyan")
    table.add_column("Devices", justify="right", style="magenta")

    table.add_row("Total devices", str(summary.total_devices))
    for name, count in summary.coverage.items():
        table.add_row(f"Reported by {name}", str(count))
    table.add_row("Unprotected (no EDR)", str(summary.unprotected))
    table.add_row("Non-compliant", str(summary.non_compliant))
    table.add_row("Detections disabled", str(summary.detections_disabled))
    table.add_row("Unencrypted", str(summary.unencrypted))
    if summary.stale_short:
        table.add_row(f"Stale > {summary.stale_short.days}d", str(summary.stale_short.stale))
    if summary.stale_long:
        table.add_row(f"Stale > {summary.stale_long.days}d", str(summary.stale_long.stale))
    table.add_row("Needs reboot", str(summary.needs_reboot))
    table.add_row("Unassigned", str(summary.unassigned))
    table.add_row("Disabled accounts", str(summary.disabled.total))
    table.add_row("High risk", str(summary.high_risk))
    return table


def render_departments(summary: FleetSummary) -> Table:
    table = Table(title="Departments")
    table.add_column("Department", style="cyan")
    for column in ("Total", "Protected", "Compliant", "Encrypted", "Stale", "High risk"):
        table.add_column(column, justify="right")
    for dept in summary.departments:
        table.add_row(
            dept.name,
            str(dept.total),
            f"{dept.protected} ({dept.protection_rate}%)",
            f"{dept.compliant} ({dept.compliance_rate}%)",
            f"{dept.encrypted} ({dept.encryption_rate}%)",
            str(dept.stale),
            str(dept.high_risk),
        )
    return table


def render_devices(devices: list[Device], page: int, pages: int) -> Table:
    table = Table(title=f"Devices (page {page}/{max(pages, 1)})")
    table.add_column("Hostname", style="cyan")
    table.add_column("User")
    table.add_column("Department")
    table.add_column("Sources")
    table.add_column("Last seen")
    table.add_column("Risk", justify="right")
    table.add_column("Status")
    for device in devices:
        level = RiskEngine.risk_level_from_score(device.risk_score or 0).value
        table.add_row(
            device.hostname,
            device.user or "Unassigned",
            device.department or "N/A",
            ", ".join(p.value for p in device.sources),
            device.last_seen.date().isoformat() if device.last_seen else "N/A",
            f"[{_RISK_STYLES[level]}]{device.risk_score}[/{_RISK_STYLES[level]}]",
            RiskEngine.device_status(device).value,
        )
    return table


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_report(args: argparse.Namespace, config: PostureConfig) -> int:
    snapshot = load_snapshot(args)
    if snapshot.is_empty:
        console.print("[yellow]No source files given; nothing to report.[/yellow]")
        return 1

    report = run_pipeline(snapshot, config=config)
    page_size = args.page_size or config.page_size
    devices = filter_devices(report.devices, args.search)
    page = clamp_page(args.page, len(devices), page_size)
    pages = page_count(len(devices), page_size)
    page_devices = paginate(devices, page_size, page)

    if args.json:
        payload = {
            "summary": report.summary.to_dict(),
            "devices": [d.to_dict() for d in page_devices],
            "page": page,
            "pages": pages,
            "total": len(devices),
        }
        print(json.dumps(payload, indent=2))
        return 0

    console.print(render_overview(report.summary))
    console.print(render_departments(report.summary))
    for alert in report.summary.alerts:
        style = "red" if alert.type == "critical" else "yellow"
        console.print(f"[{style}]• {alert.message}[/{style}]")
    console.print(render_devices(page_devices, page, pages))
    return 0


def cmd_serve(args: argparse.Namespace, config: PostureConfig) -> int:
    from posture.api import create_app

    create_app(config).run(host=args.host, port=args.port, debug=False)
    return 0


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    config = PostureConfig.from_env()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    args = build_parser().parse_args(argv)
    if args.command == "serve":
        return cmd_serve(args, config)
    return cmd_report(args, config)


if __name__ == "__main__":
    sys.exit(main())
