from lazyforms.context import FieldKey
from lazyforms.entries import Entry
from lazyforms.entry_cache import EntryCache


def test_cold_cache_returns_empty():
    cache = EntryCache()
    assert not cache.is_valid
    assert cache.get() == ()


def test_invalidate_replaces_snapshot():
    cache = EntryCache()
    first = [{"id": "1", "value": "a", "contextType": "all", "contextKey": "*"}]
    second = [{"id": "2", "value": "b", "contextType": "url", "contextKey": "https://a.com/"}]

    cache.invalidate(first)
    assert [e.id for e in cache.get()] == ["1"]

    cache.invalidate(second)
    assert [e.id for e in cache.get()] == ["2"]
    assert cache.version == 2


def test_invalidate_parses_keys_once():
    cache = EntryCache()
    cache.invalidate([{"id": "1", "value": "v", "contextType": "fieldOnly",
                       "contextKey": "https://a.com|*|#q"}])
    assert isinstance(cache.get()[0].key, FieldKey)


def test_invalidate_accepts_entries():
    entry = Entry.from_dict({"id": "x", "value": "", "contextType": "all", "contextKey": "*"})
    cache = EntryCache()
    cache.invalidate([entry])
    assert cache.get()[0] is entry


def test_invalidate_with_empty_snapshot_is_valid():
    cache = EntryCache()
    cache.invalidate([])
    assert cache.is_valid
    assert cache.get() == ()


def test_mark_stale():
    cache = EntryCache()
    cache.invalidate([{"id": "1", "value": "a", "contextType": "all"}])
    cache.mark_stale()
    assert cache.get() == ()
