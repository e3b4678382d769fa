import json
import logging

from flask import Blueprint, Response, jsonify, request

from ..settings_service import (
    export_settings,
    get_settings,
    import_settings,
    update_settings,
)

logger = logging.getLogger(__name__)

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")


@settings_bp.route("", methods=["GET"])
def read_settings():
    return jsonify({"ok": True, "settings": get_settings()})


@settings_bp.route("", methods=["PUT"])
def write_settings():
    """Updates a subset of the extension settings.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    data = request.get_json(silent=True)
    try:
        settings = update_settings(data)
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    except Exception as e:
        logger.error("Error updating settings: %s", e, exc_info=True)
        return jsonify({"ok": False, "error": "Could not save settings"}), 500
    return jsonify({"ok": True, "settings": settings}), 200


@settings_bp.route("/export", methods=["GET"])
def download_settings():
    body = json.dumps(export_settings(), indent=2)
    response = Response(body, mimetype="application/json")
    response.headers["Content-Disposition"] = "attachment; filename=lazy-forms-settings.json"
    return response


@settings_bp.route("/import", methods=["POST"])
def upload_settings():
    payload = request.get_json(silent=True)
    try:
        settings = import_settings(payload)
    except ValueError as e:
        return jsonify({"ok": False, "error": str(e)}), 400
    except Exception as e:
        logger.error("Error importing settings: %s", e, exc_info=True)
        return jsonify({"ok": False, "error": "Could not import settings"}), 500
    return jsonify({"ok": True, "settings": settings}), 200
