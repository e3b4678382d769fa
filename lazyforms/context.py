"""Page contexts and parsed entry context keys.

A context key is parsed once, when an entry enters the cache, into one of the
variants below. Matching then dispatches on the variant instead of splitting
strings on every hover event.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "|"
SCHEME_MARKER = "://"


class ContextType(str, Enum):
    FIELD_ONLY = "fieldOnly"
    URL = "url"
    DOMAIN = "domain"
    ALL = "all"
    URL_PATTERN = "urlPattern"

    @classmethod
    def coerce(cls, raw) -> Optional["ContextType"]:
        """Returns the matching member, or None for unrecognized strings."""
        try:
            return cls(raw)
        except ValueError:
            return None


@dataclass(frozen=True)
class PageContext:
    """Where a resolution is evaluated: the tab's location plus the focused field."""
    url: str
    origin: str
    pathname: str
    selector: str = ""

    @classmethod
    def from_url(cls, url: Optional[str]) -> Optional["PageContext"]:
        """Derives a selector-less context from an http(s) URL.

        Returns None for other schemes (chrome://, about:blank, file://) and
        for URLs that cannot be parsed.
        """
        if not url or not url.startswith("http"):
            return None
        try:
            parts = urlsplit(url)
        except ValueError:
            logger.warning("Could not parse tab URL %r", url)
            return None
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return None
        host = parts.netloc.rsplit("@", 1)[-1].lower()
        default_port = ":80" if parts.scheme == "http" else ":443"
        if host.endswith(default_port):
            host = host[:-len(default_port)]
        return cls(
            url=url,
            origin=f"{parts.scheme}://{host}",
            pathname=parts.path or "/",
            selector="",
        )

    @classmethod
    def from_dict(cls, data) -> Optional["PageContext"]:
        """Builds a context from the extension's ``pageInfo`` payload."""
        if not isinstance(data, dict):
            return None
        url = data.get("url")
        origin = data.get("origin")
        pathname = data.get("pathname")
        if not all(isinstance(v, str) for v in (url, origin, pathname)):
            return None
        selector = data.get("selector") or ""
        if not isinstance(selector, str):
            selector = ""
        return cls(url=url, origin=origin, pathname=pathname, selector=selector)

    def with_selector(self, selector: str) -> "PageContext":
        return PageContext(self.url, self.origin, self.pathname, selector or "")

    def same_page(self, other: Optional["PageContext"]) -> bool:
        return (other is not None and self.origin == other.origin
                and self.pathname == other.pathname)

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "origin": self.origin,
            "pathname": self.pathname,
            "selector": self.selector,
        }


@dataclass(frozen=True)
class EmptyKey:
    raw: str = ""


@dataclass(frozen=True)
class BareSelectorKey:
    """A selector with no origin, e.g. ``#searchOverlayInput``."""
    raw: str
    selector: str


@dataclass(frozen=True)
class FieldKey:
    """``origin|pathname|selector``; each segment may be empty, ``*`` or a glob."""
    raw: str
    origin: str
    pathname: str
    selector: str


@dataclass(frozen=True)
class LegacyCompositeKey:
    """Contains ``|`` but not exactly three segments (hand-edited or imported data)."""
    raw: str

    @property
    def segments(self):
        return self.raw.split(KEY_SEPARATOR)


@dataclass(frozen=True)
class UrlKey:
    """Exact URL, origin, ``*`` or URL glob."""
    raw: str


ContextKey = Union[EmptyKey, BareSelectorKey, FieldKey, LegacyCompositeKey, UrlKey]


def parse_context_key(raw, strip: bool = True) -> ContextKey:
    """Parses a stored context key into its structural variant.

    With ``strip=False`` the segments keep surrounding whitespace, which
    then takes part in matching; only a bare selector is still trimmed.
    Never raises: non-string keys are treated as absent.
    """
    if not isinstance(raw, str):
        return EmptyKey()
    key = raw.strip() if strip else raw
    if not key.strip():
        return EmptyKey(raw)
    if KEY_SEPARATOR in key:
        parts = key.split(KEY_SEPARATOR)
        if len(parts) == 3:
            return FieldKey(raw, parts[0], parts[1], parts[2])
        return LegacyCompositeKey(key)
    if SCHEME_MARKER not in key:
        return BareSelectorKey(raw, key.strip())
    return UrlKey(raw)


def carries_selector(key: ContextKey) -> bool:
    """True for keys that name a specific field rather than a whole page."""
    return isinstance(key, (BareSelectorKey, FieldKey))


def compose_context_key(context_type, page_context: Optional[PageContext]) -> str:
    """Builds the key stored for a new entry captured on ``page_context``."""
    if page_context is None:
        return ""
    context_type = ContextType.coerce(context_type)
    if context_type is ContextType.FIELD_ONLY:
        return KEY_SEPARATOR.join(
            (page_context.origin, page_context.pathname, page_context.selector or ""))
    if context_type is ContextType.URL:
        return page_context.url or ""
    if context_type is ContextType.ALL:
        return "*"
    return page_context.origin or ""
