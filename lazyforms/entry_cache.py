import logging
from typing import Iterable, Tuple

from .entries import Entry

logger = logging.getLogger(__name__)


class EntryCache:
    """In-process mirror of the durable entry collection.

    Hover and focus events arrive far faster than storage round-trips, so
    they read from here. The mirror is replaced wholesale whenever storage
    reports a change; it is never patched entry by entry.
    """

    def __init__(self):
        self._snapshot: Tuple[Entry, ...] = ()
        self._valid = False
        self.version = 0

    @property
    def is_valid(self) -> bool:
        return self._valid

    def get(self) -> Tuple[Entry, ...]:
        """Returns the last snapshot, or an empty tuple while the cache is cold."""
        if not self._valid:
            return ()
        return self._snapshot

    def invalidate(self, new_snapshot: Iterable) -> Tuple[Entry, ...]:
        """Replaces the snapshot and marks it valid.

        Accepts ``Entry`` objects or the raw dicts storage hands out; raw
        dicts have their context keys parsed here, once.
        """
        snapshot = tuple(
            item if isinstance(item, Entry) else Entry.from_dict(item)
            for item in (new_snapshot or ())
        )
        self._snapshot, self._valid = snapshot, True
        self.version += 1
        logger.info("Entry cache refreshed. Version %s, %s entries.",
                    self.version, len(snapshot))
        return snapshot

    def mark_stale(self) -> None:
        self._valid = False
        logger.info("Entry cache marked stale at version %s.", self.version)
