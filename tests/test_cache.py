from __future__ import annotations

import threading

import pytest

from bundler import metrics
from bundler.cache import ResolutionCache


def test_get_or_compute_memoizes():
    cache: ResolutionCache[str, str] = ResolutionCache("path")
    calls = []

    def compute(key):
        calls.append(key)
        return key.upper()

    assert cache.get_or_compute("a", compute) == "A"
    assert cache.get_or_compute("a", compute) == "A"
    assert calls == ["a"]
    assert "a" in cache
    assert len(cache) == 1
    assert metrics.cache_event_count("path", "miss") == 1
    assert metrics.cache_event_count("path", "hit") == 1


def test_clear_drops_every_key():
    cache: ResolutionCache[str, int] = ResolutionCache("bundle")
    for key in ("a", "b", "c"):
        cache.get_or_compute(key, len)
    cache.clear()
    assert len(cache) == 0
    assert cache.keys() == []
    assert metrics.cache_event_count("bundle", "clear") == 1


def test_failed_compute_stores_nothing():
    cache: ResolutionCache[str, str] = ResolutionCache("bundle")

    def boom(key):
        raise FileNotFoundError(key)

    with pytest.raises(FileNotFoundError):
        cache.get_or_compute("x", boom)
    assert "x" not in cache


def test_concurrent_misses_may_compute_twice_last_write_wins():
    cache: ResolutionCache[str, int] = ResolutionCache("path")
    started = threading.Barrier(2)
    counter = {"n": 0}
    lock = threading.Lock()

    def compute(key):
        started.wait(timeout=5)
        with lock:
            counter["n"] += 1
            return counter["n"]

    results = []
    threads = [threading.Thread(target=lambda: results.append(cache.get_or_compute("k", compute))) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    assert counter["n"] == 2
    assert sorted(results) == [1, 2]
    assert cache.get_or_compute("k", compute) in (1, 2)


def test_clear_while_populating_is_consistent():
    cache: ResolutionCache[int, int] = ResolutionCache("path")
    stop = threading.Event()

    def writer():
        i = 0
        while not stop.is_set():
            cache.get_or_compute(i % 50, lambda k: k * 2)
            i += 1

    def clearer():
        for _ in range(200):
            cache.clear()

    threads = [threading.Thread(target=writer) for _ in range(4)]
    for t in threads:
        t.start()
    clearer()
    stop.set()
    for t in threads:
        t.join(timeout=5)

    for key in cache.keys():
        assert cache.get_or_compute(key, lambda k: -1) == key * 2
