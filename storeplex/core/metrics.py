# Copyright (c) 2026 Storeplex Contributors. All Rights Reserved.

"""
Metrics — In-process counters for auth and provisioning outcomes.

Counter names may carry a single label, rendered as ``name{label}``:

    platform_metrics.inc("login", label="staff:ok")
"""

from __future__ import annotations

import time
from collections import defaultdict, deque
from typing import Any, Deque, Dict, Optional

_WINDOW = 500


def _series(name: str, label: Optional[str]) -> str:
    return f"{name}{{{label}}}" if label else name


class Metrics:
    """Counters, gauges and a rolling latency window per series."""

    def __init__(self):
        self._counters: Dict[str, int] = defaultdict(int)
        self._gauges: Dict[str, float] = {}
        self._latencies: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=_WINDOW))
        self._started = time.monotonic()

    def inc(self, name: str, amount: int = 1, label: Optional[str] = None) -> None:
        self._counters[_series(name, label)] += amount

    def get_counter(self, name: str, label: Optional[str] = None) -> int:
        return self._counters.get(_series(name, label), 0)

    def set_gauge(self, name: str, value: float) -> None:
        self._gauges[name] = value

    def observe_ms(self, name: str, value: float) -> None:
        self._latencies[name].append(value)

    def reset(self) -> None:
        self._counters.clear()
        self._gauges.clear()
        self._latencies.clear()

    def snapshot(self) -> Dict[str, Any]:
        latency = {}
        for name, window in self._latencies.items():
            if not window:
                continue
            ordered = sorted(window)
            latency[name] = {
                "count": len(ordered),
                "avg_ms": round(sum(ordered) / len(ordered), 2),
                "p95_ms": round(ordered[int(0.95 * (len(ordered) - 1))], 2),
                "max_ms": round(ordered[-1], 2),
            }
        return {
            "uptime_seconds": round(time.monotonic() - self._started, 1),
            "counters": dict(self._counters),
            "gauges": dict(self._gauges),
            "latency": latency,
        }


# Global singleton
platform_metrics = Metrics()
