"""Durable entry storage.

Every successful write commits, bumps the entry list view version and hands
the new collection to the resolver, which replaces its cache wholesale.
"""
import logging
import uuid

from sqlalchemy import func

from .cache_utils import invalidate_entries_cache
from .constants import CONTEXT_TYPES, STORAGE_VERSION
from .context import PageContext, compose_context_key
from .events import EntriesChanged
from .extensions import db, get_coordinator
from .models import EntryRecord, now_ms
from .shortcuts import normalize_shortcut

logger = logging.getLogger(__name__)


class EntryStoreError(Exception):
    pass


class EntryValidationError(EntryStoreError):
    pass


class EntryNotFoundError(EntryStoreError):
    pass


class EntryConflictError(EntryStoreError):
    pass


class ShortcutConflictError(EntryConflictError):
    pass


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _clean(data, partial=False):
    """Validates an entry payload and maps it onto column names."""
    if not isinstance(data, dict):
        raise EntryValidationError("Entry must be a JSON object")
    clean = {}
    errors = []

    if "value" in data or not partial:
        value = data.get("value", "")
        if not isinstance(value, str):
            errors.append("value must be a string")
        clean["value"] = value

    if "contextType" in data or not partial:
        context_type = data.get("contextType")
        if context_type not in CONTEXT_TYPES:
            errors.append(f"Invalid contextType: {context_type!r}")
        clean["context_type"] = context_type

    if "contextKey" in data or not partial:
        context_key = data.get("contextKey")
        if context_key is not None and not isinstance(context_key, str):
            errors.append("contextKey must be a string")
        clean["context_key"] = context_key

    if "label" in data:
        label = data.get("label")
        if label is not None and not isinstance(label, str):
            errors.append("label must be a string")
        else:
            clean["label"] = (label or "").strip() or None

    if "shortcut" in data:
        raw = data.get("shortcut")
        if raw in (None, ""):
            clean["shortcut"] = None
        else:
            shortcut = normalize_shortcut(raw)
            if shortcut is None:
                errors.append(f"Invalid shortcut: {raw!r}")
            clean["shortcut"] = shortcut

    for field, column in (("order", "order"), ("createdAt", "created_at")):
        if field in data and data[field] is not None:
            if not _is_number(data[field]):
                errors.append(f"{field} must be a number")
            clean[column] = data[field]

    if errors:
        raise EntryValidationError("; ".join(errors))
    return clean


def _check_context_key(record):
    if record.context_type == "all":
        record.context_key = record.context_key or "*"
    elif not (record.context_key or "").strip():
        raise EntryValidationError(
            f"contextKey is required for contextType {record.context_type!r}")


def _check_shortcut_free(shortcut, exclude_id=None):
    if not shortcut:
        return
    query = EntryRecord.query.filter(
        func.lower(EntryRecord.shortcut) == shortcut.lower())
    if exclude_id is not None:
        query = query.filter(EntryRecord.id != exclude_id)
    if query.first() is not None:
        raise ShortcutConflictError(f'Shortcut "{shortcut}" is already assigned')


def load_entries():
    """Returns the full collection in storage order."""
    records = EntryRecord.query.order_by(EntryRecord.created_at, EntryRecord.id).all()
    return [record.to_dict() for record in records]


def get_entry(entry_id):
    record = db.session.get(EntryRecord, entry_id)
    if record is None:
        raise EntryNotFoundError(f"Entry {entry_id} not found")
    return record


def add_entry(data):
    """Stores a new entry.

    An entry captured on a page may send ``pageInfo`` instead of a
    ``contextKey``; the key is then built from the page for its context type.
    """
    if isinstance(data, dict) and data.get("contextKey") is None and "pageInfo" in data:
        page_context = PageContext.from_dict(data["pageInfo"])
        if page_context is None:
            raise EntryValidationError("pageInfo must have url, origin and pathname")
        data = dict(data, contextKey=compose_context_key(data.get("contextType"), page_context))
    clean = _clean(data)
    entry_id = data.get("id") or str(uuid.uuid4())
    if not isinstance(entry_id, str):
        raise EntryValidationError("id must be a string")
    if db.session.get(EntryRecord, entry_id) is not None:
        raise EntryConflictError(f"Entry {entry_id} already exists")
    clean.setdefault("created_at", now_ms())
    record = EntryRecord(id=entry_id, **clean)
    _check_context_key(record)
    _check_shortcut_free(record.shortcut)
    db.session.add(record)
    _commit_and_notify()
    logger.info("Added %s entry %s.", record.context_type, record.id)
    return record


def update_entry(entry_id, updates):
    record = get_entry(entry_id)
    clean = _clean(updates, partial=True)
    clean.pop("created_at", None)
    if "shortcut" in clean:
        _check_shortcut_free(clean["shortcut"], exclude_id=entry_id)
    for column, value in clean.items():
        setattr(record, column, value)
    try:
        _check_context_key(record)
    except EntryValidationError:
        db.session.rollback()
        raise
    _commit_and_notify()
    logger.info("Updated entry %s (%s).", entry_id, ", ".join(sorted(clean)) or "no changes")
    return record


def delete_entry(entry_id):
    record = get_entry(entry_id)
    db.session.delete(record)
    _commit_and_notify()
    logger.info("Deleted entry %s.", entry_id)


def reorder_entries(entry_ids):
    """Assigns ``order`` by position in ``entry_ids``."""
    if not isinstance(entry_ids, list) or not all(isinstance(i, str) for i in entry_ids):
        raise EntryValidationError("Expected a list of entry ids")
    records = []
    for entry_id in entry_ids:
        records.append(get_entry(entry_id))
    for position, record in enumerate(records):
        record.order = position
    _commit_and_notify()
    logger.info("Reordered %s entries.", len(records))


def export_store():
    return {"version": STORAGE_VERSION, "entries": load_entries()}


def replace_all(payload):
    """Replaces the whole collection with an exported ``{version, entries}`` document."""
    if not isinstance(payload, dict) or not isinstance(payload.get("entries"), list):
        raise EntryValidationError("Invalid format: expected { entries: [...] }")

    records = []
    seen_ids = set()
    seen_shortcuts = set()
    for index, data in enumerate(payload["entries"]):
        try:
            clean = _clean(data)
        except EntryValidationError as e:
            raise EntryValidationError(f"Entry {index}: {e}") from e
        entry_id = data.get("id") or str(uuid.uuid4())
        if not isinstance(entry_id, str) or entry_id in seen_ids:
            raise EntryValidationError(f"Entry {index}: duplicate or invalid id")
        seen_ids.add(entry_id)
        shortcut = clean.get("shortcut")
        if shortcut:
            if shortcut.lower() in seen_shortcuts:
                raise ShortcutConflictError(f'Shortcut "{shortcut}" is assigned twice')
            seen_shortcuts.add(shortcut.lower())
        clean.setdefault("created_at", now_ms())
        record = EntryRecord(id=entry_id, **clean)
        _check_context_key(record)
        records.append(record)

    EntryRecord.query.delete()
    db.session.add_all(records)
    _commit_and_notify()
    logger.info("Imported %s entries (format version %s).",
                len(records), payload.get("version", STORAGE_VERSION))
    return len(records)


def notify_entries_changed():
    """Pushes the committed collection to the resolver."""
    snapshot = tuple(load_entries())
    get_coordinator().dispatch(EntriesChanged(snapshot))


def _commit_and_notify():
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    invalidate_entries_cache()
    notify_entries_changed()
