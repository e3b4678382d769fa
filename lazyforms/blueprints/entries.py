import json
import logging

from flask import Blueprint, Response, jsonify, request
from sqlalchemy.exc import IntegrityError

from ..cache_utils import make_entries_cache_key
from ..entries import Entry
from ..entry_service import (
    EntryConflictError,
    EntryNotFoundError,
    EntryValidationError,
    add_entry,
    delete_entry,
    export_store,
    get_entry,
    load_entries,
    reorder_entries,
    replace_all,
    update_entry,
)
from ..extensions import cache, db
from ..resolution import shortcut_combos

logger = logging.getLogger(__name__)

entries_bp = Blueprint("entries", __name__, url_prefix="/api/entries")


def _store_error_response(error, action):
    """Maps storage errors onto JSON error responses.

    Args:
        error (Exception): The error raised by the entry service.
        action (str): What was being attempted, for the log line.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    if isinstance(error, EntryValidationError):
        logger.warning("Rejected entry %s: %s", action, error)
        return jsonify({"error": str(error)}), 400
    if isinstance(error, EntryNotFoundError):
        return jsonify({"error": str(error)}), 404
    if isinstance(error, EntryConflictError):
        logger.warning("Conflict while trying to %s: %s", action, error)
        return jsonify({"error": str(error)}), 409
    if isinstance(error, IntegrityError):
        db.session.rollback()
        logger.warning("Integrity error while trying to %s: %s", action, error)
        return jsonify({"error": "Entry conflicts with an existing entry"}), 409
    db.session.rollback()
    logger.error("Error while trying to %s: %s", action, error, exc_info=True)
    return jsonify({"error": f"An internal error occurred while trying to {action}."}), 500


@entries_bp.route("", methods=["GET"])
@cache.cached(make_cache_key=make_entries_cache_key)
def list_entries():
    """Returns every stored entry in storage order."""
    return jsonify(load_entries())


@entries_bp.route("", methods=["POST"])
def create_entry():
    """Stores a new entry.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    data = request.get_json(silent=True)
    if not data:
        return jsonify({"error": "Missing entry data"}), 400
    try:
        record = add_entry(data)
    except Exception as e:
        return _store_error_response(e, "add an entry")
    return jsonify(record.to_dict()), 201


@entries_bp.route("/<entry_id>", methods=["GET"])
def read_entry(entry_id):
    try:
        record = get_entry(entry_id)
    except EntryNotFoundError as e:
        return jsonify({"error": str(e)}), 404
    return jsonify(record.to_dict())


@entries_bp.route("/<entry_id>", methods=["PUT"])
def edit_entry(entry_id):
    """Applies a partial update to an entry.

    Args:
        entry_id (str): The ID of the entry to update.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        return jsonify({"error": "Missing update data"}), 400
    try:
        record = update_entry(entry_id, data)
    except Exception as e:
        return _store_error_response(e, f"update entry {entry_id}")
    return jsonify(record.to_dict()), 200


@entries_bp.route("/<entry_id>", methods=["DELETE"])
def remove_entry(entry_id):
    try:
        delete_entry(entry_id)
    except Exception as e:
        return _store_error_response(e, f"delete entry {entry_id}")
    return jsonify({"message": f"Entry {entry_id} deleted"}), 200


@entries_bp.route("/reorder", methods=["POST"])
def reorder():
    """Persists a drag-and-drop order: ``{"ids": [...]}``."""
    data = request.get_json(silent=True) or {}
    try:
        reorder_entries(data.get("ids"))
    except Exception as e:
        return _store_error_response(e, "reorder entries")
    return jsonify({"ok": True}), 200


@entries_bp.route("/export", methods=["GET"])
def export_entries():
    """Downloads the collection as ``lazy-forms-config.json``."""
    body = json.dumps(export_store(), indent=2)
    response = Response(body, mimetype="application/json")
    response.headers["Content-Disposition"] = "attachment; filename=lazy-forms-config.json"
    return response


@entries_bp.route("/import", methods=["POST"])
def import_entries():
    """Replaces the collection with an exported document.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    payload = request.get_json(silent=True)
    if payload is None:
        return jsonify({"error": "Invalid JSON"}), 400
    try:
        count = replace_all(payload)
    except Exception as e:
        return _store_error_response(e, "import entries")
    return jsonify({"ok": True, "imported": count}), 200


@entries_bp.route("/shortcuts", methods=["GET"])
def list_shortcuts():
    """Key combos assigned to entries, lower-cased for keydown matching."""
    entries = [Entry.from_dict(data) for data in load_entries()]
    return jsonify({"ok": True, "keyCombos": shortcut_combos(entries)})
