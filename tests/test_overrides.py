"""
Override resolver tests

Tests the TTL cache (hits, cached misses, lazy expiry) and the resolver's
store access rules.
"""

import sqlite3

import pytest

from radio_nowplaying.overrides import OverrideCache, OverrideResolver, _MISSING
from tests.conftest import FakeClock


class CountingStore:
    """Override store that counts queries"""

    def __init__(self, rows=None, error=None):
        self.rows = rows or {}
        self.error = error
        self.queries = []

    def get_meta_override(self, raw_metadata):
        self.queries.append(raw_metadata)
        if self.error:
            raise self.error
        return self.rows.get(raw_metadata)


OVERRIDE = {'id': 7, 'raw_metadata': 'A - B', 'new_name': 'Song', 'new_artist': None, 'new_art_url': None}


@pytest.mark.unit
class TestOverrideCache:
    def test_missing_key(self):
        cache = OverrideCache(ttl=60, clock=FakeClock())
        assert cache.get('nope') is _MISSING

    def test_cached_none_is_a_hit(self):
        cache = OverrideCache(ttl=60, clock=FakeClock())
        cache.set('key', None)
        assert cache.get('key') is None

    def test_expiry_is_lazy(self):
        clock = FakeClock()
        cache = OverrideCache(ttl=60, clock=clock)
        cache.set('key', OVERRIDE)

        clock.advance(59.9)
        assert cache.get('key') == OVERRIDE

        clock.advance(0.1)
        assert cache.get('key') is _MISSING
        # Expired entries are not swept
        assert len(cache) == 1

    def test_invalidate_and_clear(self):
        cache = OverrideCache(ttl=60, clock=FakeClock())
        cache.set('a', 1)
        cache.set('b', 2)

        assert cache.invalidate('a') is True
        assert cache.invalidate('a') is False
        assert cache.get('a') is _MISSING

        cache.clear()
        assert len(cache) == 0

    def test_stats(self):
        cache = OverrideCache(ttl=60, clock=FakeClock())
        cache.set('a', 1)
        cache.get('a')
        cache.get('b')
        assert cache.get_stats() == {'hits': 1, 'misses': 1, 'size': 1}


@pytest.mark.unit
class TestOverrideResolver:
    def test_blank_key_skips_store(self):
        store = CountingStore()
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        assert resolver.resolve('') is None
        assert resolver.resolve('   ') is None
        assert resolver.resolve(None) is None
        assert store.queries == []

    def test_hit_is_cached(self):
        store = CountingStore({'A - B': OVERRIDE})
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        assert resolver.resolve('A - B') == OVERRIDE
        assert resolver.resolve('A - B') == OVERRIDE
        assert store.queries == ['A - B']

    def test_miss_is_cached(self):
        store = CountingStore()
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        assert resolver.resolve('X - Y') is None
        assert resolver.resolve('X - Y') is None
        assert store.queries == ['X - Y']

    def test_key_is_trimmed(self):
        store = CountingStore({'A - B': OVERRIDE})
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        assert resolver.resolve('  A - B ') == OVERRIDE
        assert store.queries == ['A - B']

    def test_store_queried_again_after_ttl(self):
        clock = FakeClock()
        store = CountingStore()
        resolver = OverrideResolver(store, OverrideCache(ttl=60, clock=clock))

        resolver.resolve('A - B')
        store.rows['A - B'] = OVERRIDE
        assert resolver.resolve('A - B') is None

        clock.advance(60)
        assert resolver.resolve('A - B') == OVERRIDE
        assert store.queries == ['A - B', 'A - B']

    def test_invalidate_forces_store_query(self):
        store = CountingStore()
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        resolver.resolve('A - B')
        store.rows['A - B'] = OVERRIDE
        resolver.invalidate(' A - B ')

        assert resolver.resolve('A - B') == OVERRIDE

    def test_store_errors_propagate_and_are_not_cached(self):
        store = CountingStore(error=sqlite3.OperationalError("database is locked"))
        resolver = OverrideResolver(store, OverrideCache(clock=FakeClock()))

        with pytest.raises(sqlite3.OperationalError):
            resolver.resolve('A - B')

        store.error = None
        store.rows['A - B'] = OVERRIDE
        assert resolver.resolve('A - B') == OVERRIDE

    def test_exact_match_against_database(self, test_db):
        test_db.add_meta_override('Artist - Song', new_name='Fixed')
        resolver = OverrideResolver(test_db, OverrideCache(clock=FakeClock()))

        assert resolver.resolve('artist - song') is None
        assert resolver.resolve('Artist - Song')['new_name'] == 'Fixed'
