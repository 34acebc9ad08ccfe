"""Tests for cctime.services.turn_cache."""

import pytest

from cctime.services.turn_cache import TurnCache
from helpers import BASE_TIME, make_turn


@pytest.fixture
def cache(tmp_path):
    c = TurnCache(db_path=str(tmp_path / "test_cache.db"))
    yield c
    c.close()


@pytest.fixture
def turns():
    return [
        make_turn(BASE_TIME, 1500, burst_ms=2000, session_id="s1", text="hello"),
        make_turn(BASE_TIME.replace(hour=11), 800, session_id="s1", text="again"),
    ]


# ---------------------------------------------------------------------------
# 1. Store and retrieve
# ---------------------------------------------------------------------------

def test_put_and_get(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns, decode_failures=3)
    hit = cache.get("/tmp/s1.jsonl", 1024, 1000.0)
    assert hit is not None
    cached_turns, failures = hit
    assert cached_turns == turns
    assert failures == 3


def test_timestamps_stay_aware(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    cached_turns, _ = cache.get("/tmp/s1.jsonl", 1024, 1000.0)
    assert cached_turns[0].trigger_timestamp.tzinfo is not None
    assert cached_turns[0].response_latency_ms == 1500


def test_empty_turn_list(cache):
    cache.put("/tmp/empty.jsonl", "e", 10, 1.0, [])
    assert cache.get("/tmp/empty.jsonl", 10, 1.0) == ([], 0)


# ---------------------------------------------------------------------------
# 2. Misses
# ---------------------------------------------------------------------------

def test_miss(cache):
    assert cache.get("/tmp/none.jsonl", 1, 1.0) is None


def test_stale_on_size_change(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    assert cache.get("/tmp/s1.jsonl", 2048, 1000.0) is None


def test_stale_on_mtime_change(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    assert cache.get("/tmp/s1.jsonl", 1024, 1001.0) is None


def test_stale_on_gap_change(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns, gap_seconds=900.0)
    assert cache.get("/tmp/s1.jsonl", 1024, 1000.0, gap_seconds=600.0) is None
    assert cache.get("/tmp/s1.jsonl", 1024, 1000.0, gap_seconds=900.0) is not None


def test_corrupt_entry_discarded(cache, turns, caplog):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    cache._conn.execute("UPDATE file_turns SET turns = ?", (b"not json",))
    cache._conn.commit()

    assert cache.get("/tmp/s1.jsonl", 1024, 1000.0) is None
    assert "corrupt" in caplog.text
    row = cache._conn.execute("SELECT COUNT(*) FROM file_turns").fetchone()
    assert row[0] == 0


# ---------------------------------------------------------------------------
# 3. Maintenance
# ---------------------------------------------------------------------------

def test_put_replaces(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    cache.put("/tmp/s1.jsonl", "s1", 2048, 2000.0, turns[:1])
    cached_turns, _ = cache.get("/tmp/s1.jsonl", 2048, 2000.0)
    assert len(cached_turns) == 1


def test_remove(cache, turns):
    cache.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    cache.remove("/tmp/s1.jsonl")
    assert cache.get("/tmp/s1.jsonl", 1024, 1000.0) is None


def test_clear(cache, turns):
    cache.put("/tmp/a.jsonl", "a", 1, 1.0, turns)
    cache.put("/tmp/b.jsonl", "b", 1, 1.0, turns)
    cache.clear()
    assert cache.get("/tmp/a.jsonl", 1, 1.0) is None
    assert cache.get("/tmp/b.jsonl", 1, 1.0) is None


def test_persists_across_instances(tmp_path, turns):
    db = str(tmp_path / "persist.db")
    first = TurnCache(db_path=db)
    first.put("/tmp/s1.jsonl", "s1", 1024, 1000.0, turns)
    first.close()

    second = TurnCache(db_path=db)
    try:
        assert second.get("/tmp/s1.jsonl", 1024, 1000.0) is not None
    finally:
        second.close()
