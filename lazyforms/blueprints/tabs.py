"""Browser tab events reported by the extension's background worker."""
import logging

from flask import Blueprint, jsonify, request

from ..context import PageContext
from ..events import (
    Err,
    ExplicitQuery,
    FieldInteraction,
    FieldMatchesQuery,
    FloatingMenuQuery,
    Reason,
    ShortcutPressed,
    TabActivated,
    TabClosed,
    TabNavigated,
)
from ..extensions import get_coordinator

logger = logging.getLogger(__name__)

tabs_bp = Blueprint("tabs", __name__, url_prefix="/api/tabs")

ERROR_STATUS = {
    Reason.NO_PAGE_CONTEXT: 422,
    Reason.NO_SHORTCUT_MATCH: 404,
    Reason.CACHE_COLD: 409,
    Reason.STORAGE_UNAVAILABLE: 503,
}


def _payload():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _page_context(data):
    return PageContext.from_dict(data.get("pageInfo"))


def _respond(result, render=None):
    """Turns a coordinator result into a JSON response.

    Args:
        result: ``Ok`` or ``Err`` from the coordinator.
        render (callable, optional): Builds the body fields from ``Ok.value``.

    Returns:
        A tuple containing a JSON response and the HTTP status code.
    """
    if isinstance(result, Err):
        body = {"ok": False, "error": result.reason.value}
        if result.detail:
            body["detail"] = result.detail
        return jsonify(body), ERROR_STATUS.get(result.reason, 400)
    body = {"ok": True}
    if render is not None and result.value is not None:
        body.update(render(result.value))
    return jsonify(body), 200


def _render_state(match_result):
    return {"state": get_coordinator().state_dict(match_result)}


@tabs_bp.route("/<int:tab_id>/navigated", methods=["POST"])
def tab_navigated(tab_id):
    """Page load finished in a tab."""
    data = _payload()
    result = get_coordinator().dispatch(TabNavigated(tab_id, data.get("url")))
    return _respond(result, _render_state)


@tabs_bp.route("/<int:tab_id>/activated", methods=["POST"])
def tab_activated(tab_id):
    """The user switched to a tab."""
    data = _payload()
    result = get_coordinator().dispatch(TabActivated(tab_id, data.get("url")))
    return _respond(result, _render_state)


@tabs_bp.route("/<int:tab_id>/field", methods=["POST"])
def field_hovered(tab_id):
    """Hover or focus on a form field; answered from the entry cache."""
    context = _page_context(_payload())
    result = get_coordinator().dispatch(FieldInteraction(tab_id, context))
    return _respond(result, lambda r: {
        "quickSlots": [slot.to_dict() for slot in r.quick_slots],
        "predictiveTrackingNeeded": r.predictive_tracking_needed,
    })


@tabs_bp.route("/<int:tab_id>/context-menu", methods=["POST"])
def context_menu_opened(tab_id):
    """Right-click on a field: always resolves, even for an unchanged selector."""
    context = _page_context(_payload())
    result = get_coordinator().dispatch(FieldInteraction(tab_id, context, force=True))
    return _respond(result, _render_state)


@tabs_bp.route("/<int:tab_id>/state", methods=["GET"])
def tab_state(tab_id):
    """Side panel request for the full state of a tab."""
    url = request.args.get("url")
    result = get_coordinator().dispatch(ExplicitQuery(tab_id, url))
    return _respond(result, _render_state)


@tabs_bp.route("/<int:tab_id>/field-matches", methods=["POST"])
def tab_field_matches(tab_id):
    """Field-specific matches for the inline field button."""
    context = _page_context(_payload())
    result = get_coordinator().dispatch(FieldMatchesQuery(tab_id, context))
    return _respond(result, lambda entries: {"entries": [e.to_dict() for e in entries]})


@tabs_bp.route("/<int:tab_id>/sections", methods=["POST"])
def tab_sections(tab_id):
    """Grouped matches for the floating menu."""
    context = _page_context(_payload())
    result = get_coordinator().dispatch(FloatingMenuQuery(tab_id, context))
    return _respond(result, lambda r: {"sections": r.sections_dict()})


@tabs_bp.route("/<int:tab_id>/shortcut", methods=["POST"])
def shortcut_pressed(tab_id):
    """Resolves a pressed entry shortcut to the value to apply."""
    data = _payload()
    key_combo = data.get("keyCombo")
    if not isinstance(key_combo, str) or not key_combo.strip():
        return jsonify({"ok": False, "error": "Missing keyCombo"}), 400
    result = get_coordinator().dispatch(
        ShortcutPressed(tab_id, _page_context(data), key_combo))
    return _respond(result, lambda entry: {"entry": entry.to_dict()})


@tabs_bp.route("/<int:tab_id>", methods=["DELETE"])
def tab_closed(tab_id):
    result = get_coordinator().dispatch(TabClosed(tab_id))
    return _respond(result, lambda removed: {"removed": removed})
