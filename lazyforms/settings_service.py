import logging

from .constants import DEFAULT_SETTINGS
from .extensions import db
from .models import Setting
from .shortcuts import validated_shortcut

logger = logging.getLogger(__name__)

SHORTCUT_SETTINGS = ("shortcutOpenMenu", "shortcutOpenPanel")
BOOLEAN_SETTINGS = ("showFieldIcon", "showIconOnPageValues")


def _validated(key, value):
    if key in SHORTCUT_SETTINGS:
        return validated_shortcut(value, DEFAULT_SETTINGS[key])
    if key in BOOLEAN_SETTINGS:
        return value if isinstance(value, bool) else DEFAULT_SETTINGS[key]
    return value


def get_settings():
    """Stored settings merged over the defaults."""
    settings = dict(DEFAULT_SETTINGS)
    for row in Setting.query.filter(Setting.key.in_(list(DEFAULT_SETTINGS))).all():
        settings[row.key] = _validated(row.key, row.value)
    return settings


def update_settings(partial):
    """Stores the known keys of ``partial``; invalid values fall back to defaults."""
    if not isinstance(partial, dict):
        raise ValueError("Settings must be a JSON object")
    ignored = sorted(set(partial) - set(DEFAULT_SETTINGS))
    if ignored:
        logger.warning("Ignoring unknown settings: %s", ", ".join(ignored))
    for key in DEFAULT_SETTINGS:
        if key not in partial:
            continue
        row = db.session.get(Setting, key) or Setting(key=key)
        row.value = _validated(key, partial[key])
        db.session.add(row)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    return get_settings()


def export_settings():
    return {"settings": get_settings()}


def import_settings(payload):
    if not isinstance(payload, dict) or not isinstance(payload.get("settings"), dict):
        raise ValueError("Invalid format: expected { settings: {...} }")
    return update_settings(payload["settings"])
