"""Flask REST API for the device posture inventory.

Blueprint prefix: ``/api/posture``

State lives in a process-wide ``InventorySession``; uploading a source file
replaces that source's rows and recomputes the whole inventory.
"""

from __future__ import annotations

import logging
from typing import Any

from dotenv import load_dotenv
from flask import Blueprint, Flask, jsonify, request

from posture.adapters.file_import import FileImportAdapter
from posture.config import PostureConfig
from posture.models import Device, Platform
from posture.normalize import normalize_hostname, parse_date
from posture.query import clamp_page, filter_devices, page_count, paginate
from posture.risk_engine import RiskEngine
from posture.session import InventorySession

logger = logging.getLogger(__name__)

posture_bp = Blueprint("posture", __name__, url_prefix="/api/posture")

# ---------------------------------------------------------------------------
# Module-level singletons (lazy init)
# ---------------------------------------------------------------------------
_config: PostureConfig | None = None
_session: InventorySession | None = None


def _get_config() -> PostureConfig:
    global _config
    if _config is None:
        _config = PostureConfig.from_env()
    return _config


def _get_session() -> InventorySession:
    global _session
    if _session is None:
        _session = InventorySession(_get_config())
    return _session


def _resolve_platform(slug: str) -> Platform | None:
    try:
        return Platform.from_slug(slug)
    except ValueError:
        return None


def _int_arg(name: str, default: int) -> int:
    try:
        return int(request.args.get(name, default))
    except (TypeError, ValueError):
        return default


def _device_to_dict(device: Device) -> dict[str, Any]:
    data = device.to_dict()
    data["risk_level"] = RiskEngine.risk_level_from_score(device.risk_score or 0).value
    data["status"] = RiskEngine.device_status(device).value
    return data


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------
@posture_bp.route("/health", methods=["GET"])
def health():
    cfg = _get_config()
    return jsonify(
        {
            "status": "ok",
            "module": "posture",
            "platforms": [p.slug for p in Platform],
            "limits": {
                "page_size": cfg.page_size,
                "max_import_file_size": cfg.max_import_file_size,
            },
        }
    )


# ===================================================================
# SOURCES
# ===================================================================
@posture_bp.route("/sources", methods=["GET"])
def list_sources():
    status = _get_session().source_status()
    return jsonify(
        {
            "sources": [
                s.to_dict() if s else {"platform": p.value, "slug": p.slug, "filename": None}
                for p, s in status.items()
            ]
        }
    )


@posture_bp.route("/sources/<slug>", methods=["POST"])
def upload_source(slug: str):
    """Upload a CSV/JSON export; replaces that platform's rows."""
    platform = _resolve_platform(slug)
    if platform is None:
        return jsonify({"error": f"Unknown platform: {slug}"}), 404

    file = request.files.get("file")
    if not file or not file.filename:
        return jsonify({"error": "No file uploaded"}), 400

    cfg = _get_config()
    ext = file.filename.rsplit(".", 1)[-1].lower() if "." in file.filename else ""
    if f".{ext}" not in cfg.allowed_import_extensions:
        return jsonify({"error": f"Unsupported file type. Allowed: {cfg.allowed_import_extensions}"}), 400

    data = file.read()
    if len(data) > cfg.max_import_file_size:
        return jsonify({"error": f"File too large (max {cfg.max_import_file_size // 1024 // 1024}MB)"}), 413

    result = FileImportAdapter().parse_file(data, file.filename)
    if not result.success:
        logger.warning("Rejected %s upload %s: %s", platform.value, file.filename, result.error)
        return jsonify({"error": result.error}), 400

    report = _get_session().upload(platform, result.rows, file.filename)
    return jsonify(
        {
            "platform": platform.value,
            "raw_count": result.raw_count,
            "dropped": report.dropped_rows.get(platform.value, 0),
            "total_devices": report.summary.total_devices,
        }
    ), 201


@posture_bp.route("/sources/<slug>", methods=["DELETE"])
def clear_source(slug: str):
    platform = _resolve_platform(slug)
    if platform is None:
        return jsonify({"error": f"Unknown platform: {slug}"}), 404
    report = _get_session().clear(platform)
    return jsonify({"cleared": platform.value, "total_devices": report.summary.total_devices if report else 0})


# ===================================================================
# SUMMARY
# ===================================================================
@posture_bp.route("/summary", methods=["GET"])
def get_summary():
    session = _get_session()
    raw_now = request.args.get("now")
    if raw_now:
        now = parse_date(raw_now)
        if now is None:
            return jsonify({"error": f"Invalid timestamp: {raw_now}"}), 400
        report = session.report_at(now)
    else:
        report = session.report
    if report is None:
        return jsonify({"summary": None})
    return jsonify({"summary": report.summary.to_dict(), "dropped_rows": dict(report.dropped_rows)})


# ===================================================================
# DEVICES
# ===================================================================
@posture_bp.route("/devices", methods=["GET"])
def list_devices():
    cfg = _get_config()
    report = _get_session().report
    devices = filter_devices(report.devices if report else (), request.args.get("q", ""))

    page_size = min(max(_int_arg("page_size", cfg.page_size), 1), cfg.max_page_size)
    page = clamp_page(_int_arg("page", 1), len(devices), page_size)

    return jsonify(
        {
            "devices": [_device_to_dict(d) for d in paginate(devices, page_size, page)],
            "total": len(devices),
            "page": page,
            "pages": page_count(len(devices), page_size),
            "page_size": page_size,
        }
    )


@posture_bp.route("/devices/<hostname>", methods=["GET"])
def get_device(hostname: str):
    report = _get_session().report
    device = report.device(normalize_hostname(hostname)) if report else None
    if device is None:
        return jsonify({"error": "Not found"}), 404
    return jsonify({"device": _device_to_dict(device)})


def create_app(config: PostureConfig | None = None) -> Flask:
    """Build a Flask app serving the posture blueprint."""
    global _config, _session
    load_dotenv()
    _config = config or PostureConfig.from_env()
    _session = None

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = _config.max_import_file_size + 64 * 1024
    app.register_blueprint(posture_bp)
    return app
