"""Inbound events handled by the coordinator, and the results it returns."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from .context import PageContext


@dataclass(frozen=True)
class EntriesChanged:
    """Durable storage committed a new entry collection."""
    entries: Tuple[Any, ...]


@dataclass(frozen=True)
class TabNavigated:
    tab_id: int
    url: Optional[str]


@dataclass(frozen=True)
class TabActivated:
    tab_id: int
    url: Optional[str]


@dataclass(frozen=True)
class FieldInteraction:
    """Hover or focus on a form field.

    ``force`` marks the context-menu report, which resolves even when the
    selector did not change and may read storage on a cold cache.
    """
    tab_id: int
    page_context: Optional[PageContext]
    force: bool = False


@dataclass(frozen=True)
class ExplicitQuery:
    tab_id: int
    url: Optional[str] = None


@dataclass(frozen=True)
class FieldMatchesQuery:
    tab_id: int
    page_context: Optional[PageContext] = None


@dataclass(frozen=True)
class FloatingMenuQuery:
    tab_id: int
    page_context: Optional[PageContext] = None


@dataclass(frozen=True)
class ShortcutPressed:
    tab_id: int
    page_context: Optional[PageContext]
    key_combo: str


@dataclass(frozen=True)
class TabClosed:
    tab_id: int


class Reason(str, Enum):
    NO_PAGE_CONTEXT = "no_page_context"
    NO_SHORTCUT_MATCH = "no_shortcut_match"
    CACHE_COLD = "cache_cold"
    STORAGE_UNAVAILABLE = "storage_unavailable"


@dataclass(frozen=True)
class Ok:
    value: Any = None
    ok = True


@dataclass(frozen=True)
class Err:
    reason: Reason
    detail: str = ""
    ok = False
