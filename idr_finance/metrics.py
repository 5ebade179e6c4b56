"""
In-process service metrics surfaced by ``/api/health``.

Tracks, per resource type, how the startup load went and how often the
dataset was read; plus a one-hour window of server errors.
"""

from __future__ import annotations

import threading
import time
from collections import Counter, deque
from typing import Any, Deque, Dict, Optional

ERROR_WINDOW_SECONDS = 3600.0

LOADED = "loaded"
FAILED = "failed"


class _ServiceMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hits: Counter = Counter()
        self._misses: Counter = Counter()
        self._load_outcomes: Dict[str, str] = {}
        self._last_load_seconds: Optional[float] = None
        self._error_timestamps: Deque[float] = deque()

    def record_cache_access(self, resource_type: str, hit: bool) -> None:
        with self._lock:
            (self._hits if hit else self._misses)[resource_type] += 1

    def record_load_result(self, resource_type: str, success: bool) -> None:
        with self._lock:
            self._load_outcomes[resource_type] = LOADED if success else FAILED

    def record_load_duration(self, seconds: float) -> None:
        with self._lock:
            self._last_load_seconds = seconds

    def record_error(self, ts: float | None = None) -> None:
        now = ts if ts is not None else time.time()
        with self._lock:
            self._error_timestamps.append(now)
            self._prune_locked(now)

    def snapshot(self) -> Dict[str, Any]:
        now = time.time()
        with self._lock:
            self._prune_locked(now)
            hits = sum(self._hits.values())
            reads = hits + sum(self._misses.values())
            outcomes = list(self._load_outcomes.values())
            known = set(self._load_outcomes) | set(self._hits) | set(self._misses)
            return {
                "cache_hit_rate": round(hits / reads, 4) if reads else 0.0,
                "load_success_count": outcomes.count(LOADED),
                "load_failure_count": outcomes.count(FAILED),
                "last_load_seconds": self._last_load_seconds,
                "errors_last_hour": len(self._error_timestamps),
                "resources": {
                    rt: {
                        "load": self._load_outcomes.get(rt),
                        "hits": self._hits[rt],
                        "misses": self._misses[rt],
                    }
                    for rt in sorted(known)
                },
            }

    def reset_for_tests(self) -> None:
        with self._lock:
            self._hits.clear()
            self._misses.clear()
            self._load_outcomes.clear()
            self._last_load_seconds = None
            self._error_timestamps.clear()

    def _prune_locked(self, now: float) -> None:
        cutoff = now - ERROR_WINDOW_SECONDS
        while self._error_timestamps and self._error_timestamps[0] < cutoff:
            self._error_timestamps.popleft()


_METRICS = _ServiceMetrics()


def record_cache_access(resource_type: str, hit: bool) -> None:
    _METRICS.record_cache_access(resource_type, hit)


def record_load_result(resource_type: str, success: bool) -> None:
    _METRICS.record_load_result(resource_type, success)


def record_load_duration(seconds: float) -> None:
    _METRICS.record_load_duration(seconds)


def record_error(ts: float | None = None) -> None:
    _METRICS.record_error(ts)


def metrics_snapshot() -> Dict[str, Any]:
    return _METRICS.snapshot()


def reset_metrics_for_tests() -> None:
    _METRICS.reset_for_tests()
