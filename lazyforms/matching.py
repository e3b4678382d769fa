"""Decides whether a stored entry applies to a page context.

Everything here is pure and total: malformed keys and bad globs degrade to
"no match" instead of raising, so one broken entry never hides the rest.
"""
import logging
import re
from functools import lru_cache
from typing import Optional, Pattern

from .context import (
    BareSelectorKey,
    ContextType,
    EmptyKey,
    FieldKey,
    LegacyCompositeKey,
    PageContext,
    carries_selector,
)
from .entries import Entry

logger = logging.getLogger(__name__)

WILDCARDS = ("*", "?")


def has_wildcard(text: str) -> bool:
    return any(ch in text for ch in WILDCARDS)


@lru_cache(maxsize=1024)
def glob_to_regex(glob: str) -> Pattern:
    """Compiles a ``*``/``?`` glob into an anchored, case-sensitive regex."""
    parts = []
    for ch in glob:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("^" + "".join(parts) + "$", re.DOTALL)


def glob_matches(glob, text) -> bool:
    try:
        return glob_to_regex(glob).fullmatch(text) is not None
    except (re.error, TypeError) as e:
        logger.debug("Treating glob %r as non-matching: %s", glob, e)
        return False


def segment_matches(pattern: str, actual: str) -> bool:
    """Pathname/selector segment rule: empty or ``*`` is "any", globs are
    compiled, anything else is compared literally."""
    if not pattern or pattern == "*":
        return True
    if has_wildcard(pattern):
        return glob_matches(pattern, actual)
    return pattern == actual


def origin_matches(pattern: str, origin: str, allow_glob: bool) -> bool:
    if allow_glob and has_wildcard(pattern):
        return glob_matches(pattern, origin)
    return pattern == origin


def _field_key_matches(key: FieldKey, page: PageContext, allow_origin_glob: bool) -> bool:
    return (origin_matches(key.origin, page.origin, allow_origin_glob)
            and segment_matches(key.pathname, page.pathname)
            and segment_matches(key.selector, page.selector))


def _matches_field_only(entry: Entry, page: PageContext) -> bool:
    if not page.selector:
        return False
    key = entry.key
    if isinstance(key, FieldKey):
        return _field_key_matches(key, page, allow_origin_glob=False)
    if isinstance(key, LegacyCompositeKey):
        return key.raw == f"{page.origin}|{page.pathname}|{page.selector}"
    if isinstance(key, BareSelectorKey):
        if has_wildcard(key.selector):
            return glob_matches(key.selector, page.selector)
        return key.selector == page.selector
    return False


def _matches_url_pattern(entry: Entry, page: PageContext) -> bool:
    key = entry.key
    if isinstance(key, EmptyKey):
        return False
    if page.selector:
        if isinstance(key, FieldKey) and _field_key_matches(key, page, allow_origin_glob=True):
            return True
        if isinstance(key, BareSelectorKey) and key.selector == page.selector:
            return True
    return glob_matches(key.raw, page.url)


def matches(entry: Entry, page: Optional[PageContext]) -> bool:
    """Does ``entry`` apply to ``page``?"""
    if page is None:
        return False
    context_type = entry.type
    if context_type is ContextType.ALL:
        return True
    if context_type is ContextType.URL:
        return entry.context_key is not None and entry.context_key == page.url
    if context_type is ContextType.DOMAIN:
        return entry.context_key is not None and entry.context_key == page.origin
    if context_type is ContextType.FIELD_ONLY:
        return _matches_field_only(entry, page)
    if context_type is ContextType.URL_PATTERN:
        return _matches_url_pattern(entry, page)
    return False


def matching_entries(entries, page: Optional[PageContext]) -> list:
    if page is None:
        return []
    return [entry for entry in entries if matches(entry, page)]


def could_match_page(entry: Entry, page: Optional[PageContext]) -> bool:
    """Could ``entry`` match some field on this page once a field is focused?

    The selector is deliberately ignored; it is unknown until the user
    interacts with a field.
    """
    if page is None:
        return False
    context_type = entry.type
    if context_type not in (ContextType.FIELD_ONLY, ContextType.URL_PATTERN):
        return False
    allow_origin_glob = context_type is ContextType.URL_PATTERN
    key = entry.key
    if isinstance(key, BareSelectorKey):
        return True
    if isinstance(key, FieldKey):
        key_origin, key_pathname = key.origin.lstrip(), key.pathname
    elif isinstance(key, LegacyCompositeKey):
        key_origin, key_pathname = key.segments[0].lstrip(), key.segments[1]
    else:
        return False
    return (origin_matches(key_origin, page.origin, allow_origin_glob)
            and segment_matches(key_pathname, page.pathname))


def is_field_specific(entry: Entry) -> bool:
    """``fieldOnly`` entries, and ``urlPattern`` entries whose key names a field."""
    context_type = entry.type
    if context_type is ContextType.FIELD_ONLY:
        return True
    return context_type is ContextType.URL_PATTERN and carries_selector(entry.key)
