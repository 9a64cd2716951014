"""
Metrics collection for node RPC traffic.

Thread-safe counters and timers keyed by label sets. The RPC client records
one request count, one latency observation and, on failure, one error count
per call, labelled with the RPC method.
"""

import threading
import time
from collections import defaultdict
from typing import Dict, Optional, Any, Tuple


LabelKey = Tuple[Tuple[str, str], ...]


def _labels_to_key(labels: Optional[Dict[str, str]]) -> LabelKey:
    if not labels:
        return ()
    return tuple(sorted(labels.items()))


class Counter:
    """Monotonic counter with label support."""

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._lock = threading.Lock()
        self._values: Dict[LabelKey, float] = defaultdict(float)

    def increment(self, amount: float = 1.0, labels: Optional[Dict[str, str]] = None) -> None:
        """
        Increment counter.

        Args:
            amount: Amount to increment (must be >= 0)
            labels: Optional labels
        """
        if amount < 0:
            raise ValueError("Counter increment must be >= 0")
        with self._lock:
            self._values[_labels_to_key(labels)] += amount

    def get_value(self, labels: Optional[Dict[str, str]] = None) -> float:
        with self._lock:
            return self._values.get(_labels_to_key(labels), 0.0)

    def reset(self) -> None:
        with self._lock:
            self._values.clear()


class Timer:
    """
    Duration recorder.

    Keeps count, sum and max per label set; enough for average latency
    without holding every sample.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.description = description
        self._lock = threading.Lock()
        self._stats: Dict[LabelKey, Dict[str, float]] = {}

    def time(self, labels: Optional[Dict[str, str]] = None) -> "TimerContext":
        """Context manager that observes the duration of its block."""
        return TimerContext(self, labels)

    def observe(self, duration: float, labels: Optional[Dict[str, str]] = None) -> None:
        with self._lock:
            stats = self._stats.setdefault(_labels_to_key(labels), {"count": 0, "sum": 0.0, "max": 0.0})
            stats["count"] += 1
            stats["sum"] += duration
            stats["max"] = max(stats["max"], duration)

    def get_stats(self, labels: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Get timer statistics.

        Returns:
            Dictionary with count, sum, max and mean
        """
        with self._lock:
            stats = dict(self._stats.get(_labels_to_key(labels), {"count": 0, "sum": 0.0, "max": 0.0}))
        stats["count"] = int(stats["count"])
        stats["mean"] = stats["sum"] / stats["count"] if stats["count"] else 0.0
        return stats

    def reset(self) -> None:
        with self._lock:
            self._stats.clear()


class TimerContext:
    """Context manager for timing operations."""

    def __init__(self, timer: Timer, labels: Optional[Dict[str, str]] = None):
        self.timer = timer
        self.labels = labels
        self.start_time = 0.0

    def __enter__(self):
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.observe(time.monotonic() - self.start_time, self.labels)


class MetricsRegistry:
    """
    Registry for managing metrics.

    Returns the existing metric when a name is requested twice; asking for
    a name under a different metric kind is an error.
    """

    def __init__(self):
        self._metrics: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, name: str, kind: type, description: str):
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                metric = kind(name, description)
                self._metrics[name] = metric
            elif not isinstance(metric, kind):
                raise ValueError(f"Metric {name} exists but is not a {kind.__name__}")
            return metric

    def counter(self, name: str, description: str = "") -> Counter:
        return self._get_or_create(name, Counter, description)

    def timer(self, name: str, description: str = "") -> Timer:
        return self._get_or_create(name, Timer, description)

    def get(self, name: str) -> Optional[Any]:
        with self._lock:
            return self._metrics.get(name)

    def reset_all(self) -> None:
        with self._lock:
            metrics = list(self._metrics.values())
        for metric in metrics:
            metric.reset()


_global_registry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Get the process-wide metrics registry."""
    return _global_registry
