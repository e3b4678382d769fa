"""Routes inbound events through the resolver and publishes the results.

One coordinator owns all mutable resolver state. Requests arrive on several
WSGI threads; the coordinator lock makes each event run to completion
before the next one starts, which is the only ordering the resolver needs.
"""
import logging
import threading
from functools import singledispatchmethod
from typing import Callable, Iterable, Optional

from .context import PageContext
from .entry_cache import EntryCache
from .events import (
    EntriesChanged,
    Err,
    ExplicitQuery,
    FieldInteraction,
    FieldMatchesQuery,
    FloatingMenuQuery,
    Ok,
    Reason,
    ShortcutPressed,
    TabActivated,
    TabClosed,
    TabNavigated,
)
from .resolution import (
    MatchResult,
    entry_for_shortcut,
    field_matches,
    resolve,
)
from .ranking import group_by_context_type
from .tab_tracker import TabContextTracker

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    pass


class ResolverState:
    """Everything the resolver remembers between events."""

    def __init__(self):
        self.cache = EntryCache()
        self.tabs = TabContextTracker()
        self.active_tab_id = None


class Coordinator:
    def __init__(self, publisher=None, loader: Optional[Callable[[], Iterable]] = None,
                 state: Optional[ResolverState] = None):
        self.state = state or ResolverState()
        self.publisher = publisher
        self.loader = loader
        self._lock = threading.RLock()

    def dispatch(self, event):
        """Handles one event to completion and returns ``Ok`` or ``Err``."""
        with self._lock:
            return self._handle(event)

    def entries(self):
        with self._lock:
            return self.state.cache.get()

    def state_dict(self, result: MatchResult) -> dict:
        """Full side panel state: the match result plus every cached entry,
        both as a flat list and grouped by context type."""
        entries = self.entries()
        state = result.to_dict()
        state["entries"] = [e.to_dict() for e in entries]
        state["groups"] = {
            name: [e.to_dict() for e in group]
            for name, group in group_by_context_type(entries).items()
        }
        return state

    # --- Handlers ---

    @singledispatchmethod
    def _handle(self, event):
        raise TypeError(f"Unhandled resolver event: {type(event).__name__}")

    @_handle.register
    def _(self, event: EntriesChanged):
        entries = self.state.cache.invalidate(event.entries)
        tab_ids = ([self.state.active_tab_id]
                   if self.state.active_tab_id in self.state.tabs
                   else self.state.tabs.tab_ids())
        for tab_id in tab_ids:
            self._publish(tab_id, resolve(self.state.tabs.get(tab_id), entries))
        return Ok(len(entries))

    @_handle.register
    def _(self, event: TabNavigated):
        context = self.state.tabs.set_from_navigation(event.tab_id, event.url)
        return self._refresh(event.tab_id, context)

    @_handle.register
    def _(self, event: TabActivated):
        self.state.active_tab_id = event.tab_id
        context = self.state.tabs.ensure(event.tab_id, event.url)
        return self._refresh(event.tab_id, context)

    @_handle.register
    def _(self, event: FieldInteraction):
        if event.page_context is None:
            return Err(Reason.NO_PAGE_CONTEXT)
        previous = self.state.tabs.get(event.tab_id)
        if (not event.force and event.page_context.same_page(previous)
                and previous.selector == event.page_context.selector):
            logger.debug("Tab %s: selector %r unchanged, skipping resolution.",
                         event.tab_id, event.page_context.selector)
            return Ok(None)
        context = self.state.tabs.set_from_interaction(event.tab_id, event.page_context)
        if event.force:
            return self._refresh(event.tab_id, context)
        if not self.state.cache.is_valid:
            return Err(Reason.CACHE_COLD)
        result = resolve(context, self.state.cache.get())
        self._publish(event.tab_id, result)
        return Ok(result)

    @_handle.register
    def _(self, event: ExplicitQuery):
        if event.tab_id in self.state.tabs:
            context = self.state.tabs.get(event.tab_id)
        elif event.url:
            context = self.state.tabs.set_from_navigation(event.tab_id, event.url)
        else:
            # No page to resolve against; the side panel can still list every entry
            try:
                return Ok(resolve(None, self._entries()))
            except StorageUnavailable as e:
                return Err(Reason.STORAGE_UNAVAILABLE, str(e))
        return self._refresh(event.tab_id, context)

    @_handle.register
    def _(self, event: FieldMatchesQuery):
        context = self._query_context(event.tab_id, event.page_context)
        if context is None:
            return Err(Reason.NO_PAGE_CONTEXT)
        try:
            entries = self._entries()
        except StorageUnavailable as e:
            return Err(Reason.STORAGE_UNAVAILABLE, str(e))
        return Ok(field_matches(context, entries))

    @_handle.register
    def _(self, event: FloatingMenuQuery):
        context = self._query_context(event.tab_id, event.page_context)
        if context is None:
            return Err(Reason.NO_PAGE_CONTEXT)
        try:
            entries = self._entries()
        except StorageUnavailable as e:
            return Err(Reason.STORAGE_UNAVAILABLE, str(e))
        return Ok(resolve(context, entries))

    @_handle.register
    def _(self, event: ShortcutPressed):
        if event.page_context is None:
            return Err(Reason.NO_PAGE_CONTEXT)
        self.state.tabs.set_from_interaction(event.tab_id, event.page_context)
        try:
            entries = self._entries()
        except StorageUnavailable as e:
            return Err(Reason.STORAGE_UNAVAILABLE, str(e))
        entry = entry_for_shortcut(event.page_context, entries, event.key_combo)
        if entry is None:
            return Err(Reason.NO_SHORTCUT_MATCH, event.key_combo)
        return Ok(entry)

    @_handle.register
    def _(self, event: TabClosed):
        removed = self.state.tabs.remove(event.tab_id)
        if self.state.active_tab_id == event.tab_id:
            self.state.active_tab_id = None
        return Ok(removed)

    # --- Helpers ---

    def _query_context(self, tab_id, page_context: Optional[PageContext]):
        if page_context is not None:
            return page_context
        return self.state.tabs.get(tab_id)

    def _entries(self):
        """Cached entries, reading storage through the loader on a cold cache."""
        cache = self.state.cache
        if cache.is_valid or self.loader is None:
            return cache.get()
        try:
            snapshot = self.loader()
        except Exception as e:
            cache.mark_stale()
            logger.error("Could not load entries from storage: %s", e, exc_info=True)
            raise StorageUnavailable(str(e)) from e
        return cache.invalidate(snapshot)

    def _refresh(self, tab_id, context: Optional[PageContext]):
        try:
            entries = self._entries()
        except StorageUnavailable as e:
            return Err(Reason.STORAGE_UNAVAILABLE, str(e))
        result = resolve(context, entries)
        self._publish(tab_id, result)
        return Ok(result)

    def _publish(self, tab_id, result: MatchResult):
        if self.publisher is None:
            return
        self.publisher.publish("quickSlots", {
            "tabId": tab_id,
            "quickSlots": [slot.to_dict() for slot in result.quick_slots],
        })
        self.publisher.publish("sections", {
            "tabId": tab_id,
            "sections": result.sections_dict(),
        })
        self.publisher.publish("stateUpdated", {"tabId": tab_id, "state": self.state_dict(result)})
        self.publisher.publish("fieldTracking", {
            "tabId": tab_id,
            "enabled": result.predictive_tracking_needed,
        })
