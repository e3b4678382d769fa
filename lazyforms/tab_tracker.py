import logging
from typing import Dict, Optional

from .context import PageContext

logger = logging.getLogger(__name__)


class TabContextTracker:
    """Last known page/field context for every open tab.

    A tab whose current URL cannot be resolved (chrome://, about:blank) is
    tracked with a ``None`` context so that it is still known to be open.
    """

    def __init__(self):
        self._contexts: Dict[int, Optional[PageContext]] = {}

    def __contains__(self, tab_id) -> bool:
        return tab_id in self._contexts

    def __len__(self) -> int:
        return len(self._contexts)

    def get(self, tab_id) -> Optional[PageContext]:
        return self._contexts.get(tab_id)

    def set_from_navigation(self, tab_id, url: Optional[str]) -> Optional[PageContext]:
        """Records a page load.

        The previous selector survives when origin and pathname are
        unchanged, so hash changes and SPA re-renders keep the field that
        was already known.
        """
        context = PageContext.from_url(url)
        previous = self._contexts.get(tab_id)
        if (context is not None and previous is not None
                and previous.selector and context.same_page(previous)):
            context = context.with_selector(previous.selector)
        self._contexts[tab_id] = context
        return context

    def set_from_interaction(self, tab_id, context: Optional[PageContext]) -> Optional[PageContext]:
        """Replaces the tab's context with a complete report from the page."""
        self._contexts[tab_id] = context
        return context

    def ensure(self, tab_id, url: Optional[str]) -> Optional[PageContext]:
        """Tab activation: keep what we know, otherwise derive from the URL."""
        if self._contexts.get(tab_id) is not None:
            return self._contexts[tab_id]
        return self.set_from_navigation(tab_id, url)

    def last_selector(self, tab_id) -> Optional[str]:
        context = self._contexts.get(tab_id)
        return context.selector if context is not None else None

    def remove(self, tab_id) -> bool:
        removed = self._contexts.pop(tab_id, _MISSING) is not _MISSING
        if removed:
            logger.info("Dropped page context for closed tab %s.", tab_id)
        return removed

    def tab_ids(self):
        return list(self._contexts)


_MISSING = object()
