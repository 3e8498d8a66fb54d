from __future__ import annotations

import threading
from collections import defaultdict
from typing import Dict, Tuple


_lock = threading.Lock()
_cache_events: Dict[Tuple[str, str], int] = defaultdict(int)
_count: Dict[Tuple[str, str, int], int] = defaultdict(int)
_buckets = [
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
]
_hist_count: Dict[Tuple[str, str], int] = defaultdict(int)
_hist_sum: Dict[Tuple[str, str], float] = defaultdict(float)
_hist_buckets: Dict[Tuple[str, str, float], int] = defaultdict(int)


def record_cache_event(cache: str, event: str) -> None:
    """Count a cache ``hit``, ``miss`` or ``clear`` for the named cache."""

    with _lock:
        _cache_events[(cache, event)] += 1


def cache_event_count(cache: str, event: str) -> int:
    with _lock:
        return int(_cache_events.get((cache, event), 0))


def observe_request(handler: str, method: str, status: int, duration_s: float) -> None:
    key = (handler, method.upper(), int(status))
    hkey = (handler, method.upper())
    with _lock:
        _count[key] += 1
        _hist_count[hkey] += 1
        _hist_sum[hkey] += float(duration_s)
        placed = False
        for le in _buckets:
            if duration_s <= le:
                _hist_buckets[(handler, method.upper(), le)] += 1
                placed = True
                break
        if not placed:
            _hist_buckets[(handler, method.upper(), float("inf"))] += 1


def reset_metrics() -> None:
    """Testing helper to drop every recorded sample."""

    with _lock:
        _cache_events.clear()
        _count.clear()
        _hist_count.clear()
        _hist_sum.clear()
        _hist_buckets.clear()


def _esc(v: str) -> str:
    return v.replace("\\", "\\\\").replace("\n", "\\n").replace('"', '\\"')


def export_prometheus() -> str:
    lines = []
    lines.append("# HELP bundler_cache_events_total Asset cache hits, misses and clears")
    lines.append("# TYPE bundler_cache_events_total counter")
    with _lock:
        for (cache, event), val in sorted(_cache_events.items()):
            lines.append(
                f'bundler_cache_events_total{{cache="{_esc(cache)}",event="{_esc(event)}"}} {int(val)}'
            )

        lines.append("# HELP bundler_request_total Total HTTP requests")
        lines.append("# TYPE bundler_request_total counter")
        for (handler, method, status), val in sorted(_count.items()):
            lines.append(
                f'bundler_request_total{{handler="{_esc(handler)}",method="{_esc(method)}",status="{int(status)}"}} {int(val)}'
            )

        lines.append("# HELP bundler_request_duration_seconds Request duration histogram")
        lines.append("# TYPE bundler_request_duration_seconds histogram")
        for handler, method in sorted(_hist_count.keys()):
            cumulative = 0
            for le in _buckets:
                cumulative += _hist_buckets.get((handler, method, le), 0)
                lines.append(
                    f'bundler_request_duration_seconds_bucket{{handler="{_esc(handler)}",method="{_esc(method)}",le="{le}"}} {int(cumulative)}'
                )
            cumulative += _hist_buckets.get((handler, method, float("inf")), 0)
            lines.append(
                f'bundler_request_duration_seconds_bucket{{handler="{_esc(handler)}",method="{_esc(method)}",le="+Inf"}} {int(cumulative)}'
            )
            lines.append(
                f'bundler_request_duration_seconds_sum{{handler="{_esc(handler)}",method="{_esc(method)}"}} {float(_hist_sum.get((handler, method), 0.0))}'
            )
            lines.append(
                f'bundler_request_duration_seconds_count{{handler="{_esc(handler)}",method="{_esc(method)}"}} {int(_hist_count.get((handler, method), 0))}'
            )
    return "\n".join(lines) + "\n"
