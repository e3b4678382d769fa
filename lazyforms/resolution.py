"""Turns a page context and the cached entries into what the extension shows."""
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence

from .constants import (
    EMPTY_VALUE_TITLE,
    MAX_QUICK_SLOTS,
    MAX_SECTION_ENTRIES,
    MAX_TITLE_LENGTH,
)
from .context import ContextType, FieldKey, PageContext
from .entries import Entry
from .matching import could_match_page, is_field_specific, matching_entries
from .ranking import sort_by_specificity
from .shortcuts import shortcut_token

logger = logging.getLogger(__name__)

SECTION_NAMES = ("field", "url", "domain", "custom", "all")
_CAPPED_SECTIONS = ("url", "domain", "custom", "all")


@dataclass(frozen=True)
class QuickSlot:
    index: int
    entry_id: str
    title: str

    def to_dict(self) -> dict:
        return {"index": self.index, "entryId": self.entry_id, "title": self.title}


@dataclass
class MatchResult:
    page_context: Optional[PageContext]
    matches: List[Entry] = field(default_factory=list)
    quick_slots: List[QuickSlot] = field(default_factory=list)
    sections: Dict[str, List[Entry]] = field(
        default_factory=lambda: {name: [] for name in SECTION_NAMES})
    predictive_tracking_needed: bool = False

    def sections_dict(self) -> dict:
        return {name: [e.to_dict() for e in self.sections[name]] for name in SECTION_NAMES}

    def to_dict(self) -> dict:
        return {
            "pageInfo": self.page_context.to_dict() if self.page_context else None,
            "matches": [e.to_dict() for e in self.matches],
            "quickSlots": [slot.to_dict() for slot in self.quick_slots],
            "sections": self.sections_dict(),
            "predictiveTrackingNeeded": self.predictive_tracking_needed,
        }


def slot_title(entry: Entry) -> str:
    """Context menu title: quoted label or value, shortened, plus its shortcut."""
    raw = str(entry.label or entry.value or "")
    if len(raw) > MAX_TITLE_LENGTH:
        raw = raw[:MAX_TITLE_LENGTH - 3] + "…"
    title = f'"{raw}"' if raw else f'"{EMPTY_VALUE_TITLE}"'
    if entry.shortcut:
        title = f"{title} ({entry.shortcut})"
    return title


def build_quick_slots(matches: Iterable[Entry]) -> List[QuickSlot]:
    ranked = sort_by_specificity(matches)[:MAX_QUICK_SLOTS]
    return [QuickSlot(i, entry.id, slot_title(entry)) for i, entry in enumerate(ranked)]


def build_sections(matches: Iterable[Entry]) -> Dict[str, List[Entry]]:
    """Groups matches for the floating menu.

    ``field`` holds everything tied to the focused field and is never
    truncated; the broader sections are capped.
    """
    sections = {name: [] for name in SECTION_NAMES}
    for entry in sort_by_specificity(matches):
        context_type = entry.type
        if is_field_specific(entry):
            sections["field"].append(entry)
        elif context_type is ContextType.URL:
            sections["url"].append(entry)
        elif context_type is ContextType.DOMAIN:
            sections["domain"].append(entry)
        elif context_type is ContextType.ALL:
            sections["all"].append(entry)
        elif context_type is ContextType.URL_PATTERN:
            sections["custom"].append(entry)
    for name in _CAPPED_SECTIONS:
        del sections[name][MAX_SECTION_ENTRIES:]
    return sections


def predictive_tracking_needed(page: Optional[PageContext], entries: Iterable[Entry]) -> bool:
    if page is None:
        return False
    return any(could_match_page(entry, page) for entry in entries)


def resolve(page: Optional[PageContext], entries: Sequence[Entry]) -> MatchResult:
    """Full resolution for one page context."""
    if page is None:
        return MatchResult(page_context=None)
    matches = matching_entries(entries, page)
    result = MatchResult(
        page_context=page,
        matches=matches,
        quick_slots=build_quick_slots(matches),
        sections=build_sections(matches),
        predictive_tracking_needed=predictive_tracking_needed(page, entries),
    )
    logger.debug("Resolved %s of %s entries for %s (selector %r).",
                 len(matches), len(entries), page.url, page.selector)
    return result


def _names_one_field(entry: Entry) -> bool:
    """Field-specific, excluding ``urlPattern`` keys whose selector segment is
    empty or ``*`` (those cover every field of a page)."""
    if not is_field_specific(entry):
        return False
    key = entry.key
    if entry.type is ContextType.URL_PATTERN and isinstance(key, FieldKey):
        return key.selector.strip() not in ("", "*")
    return True


def field_matches(page: Optional[PageContext], entries: Sequence[Entry]) -> List[Entry]:
    """Matches tied to the focused field, for the inline field button."""
    return sort_by_specificity(
        e for e in matching_entries(entries, page) if _names_one_field(e))


def entry_for_shortcut(page: Optional[PageContext], entries: Sequence[Entry],
                       key_combo: str) -> Optional[Entry]:
    """The most specific matching entry bound to ``key_combo``, if any."""
    token = shortcut_token(key_combo)
    if token is None:
        return None
    bound = [e for e in matching_entries(entries, page) if shortcut_token(e.shortcut) == token]
    ranked = sort_by_specificity(bound)
    return ranked[0] if ranked else None


def shortcut_combos(entries: Iterable[Entry]) -> List[str]:
    """Lower-cased combos the content script should intercept."""
    combos = []
    for entry in entries:
        token = shortcut_token(entry.shortcut)
        if token and token not in combos:
            combos.append(token)
    return combos
