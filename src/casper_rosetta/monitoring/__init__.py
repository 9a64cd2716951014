"""Monitoring and telemetry for node RPC traffic."""

from .metrics import Counter, Timer, TimerContext, MetricsRegistry, get_registry

__all__ = [
    "Counter",
    "Timer",
    "TimerContext",
    "MetricsRegistry",
    "get_registry",
]
