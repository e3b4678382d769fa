from lazyforms.cache_utils import (
    get_version,
    invalidate_entries_cache,
    make_entries_cache_key,
)
from lazyforms.constants import ENTRIES_VERSION_KEY
from lazyforms.extensions import cache


def test_get_version_default(app):
    """get_version returns the default without persisting it."""
    assert get_version("non_existent_key") == 1
    assert cache.get("non_existent_key") is None
    assert get_version("non_existent_key", default=5) == 5


def test_get_version_falsy_cached_value(app):
    cache.set("test_key", 0)
    assert get_version("test_key", default=5) == 0


def test_make_entries_cache_key(app):
    assert make_entries_cache_key() == "view/entries/v1"
    invalidate_entries_cache()
    assert make_entries_cache_key() == "view/entries/v2"


def test_invalidate_entries_cache_increments(app):
    cache.set(ENTRIES_VERSION_KEY, 7)
    assert invalidate_entries_cache() == 8
    assert cache.get(ENTRIES_VERSION_KEY) == 8


def test_entry_write_invalidates_list_view(client):
    assert client.get("/api/entries").get_json() == []

    client.post("/api/entries", json={"value": "v", "contextType": "all"})

    assert len(client.get("/api/entries").get_json()) == 1
