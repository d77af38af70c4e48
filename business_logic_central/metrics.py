from __future__ import annotations

import time
from contextlib import contextmanager


class Counter:
    def __init__(self, name: str) -> None:
        self.name = name
        self.value = 0

    def inc(self, n: int = 1) -> None:
        self.value += n


class Timer:
    """Keeps the duration of the most recently finished timed block.

    Each ``time()`` block holds its own start, so blocks may nest: an event
    fired from inside another event's instruction records its own duration
    first, and the outer firing overwrites it when it finishes.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self.last_ms: float | None = None

    def record(self, ms: float) -> None:
        self.last_ms = ms

    @contextmanager
    def time(self):  # noqa: ANN201 (to keep it lightweight)
        started = time.perf_counter()
        try:
            yield
        finally:
            self.record((time.perf_counter() - started) * 1000)


def snapshot() -> dict[str, float | int | None]:
    """Current value of every registry metric, keyed by name."""
    values: dict[str, float | int | None] = {c.name: c.value for c in _COUNTERS}
    values[event_latency_ms.name] = event_latency_ms.last_ms
    return values


def reset_all() -> None:
    """Zero every registry metric (used by tests)."""
    for counter in _COUNTERS:
        counter.value = 0
    event_latency_ms.last_ms = None


# Registry metrics; events with no instructions count as unrecognized
events_fired_total = Counter("events_fired_total")
events_unrecognized_total = Counter("events_unrecognized_total")
instructions_invoked_total = Counter("instructions_invoked_total")
instructions_applied_total = Counter("instructions_applied_total")
event_latency_ms = Timer("event_latency_ms")

_COUNTERS = (
    events_fired_total,
    events_unrecognized_total,
    instructions_invoked_total,
    instructions_applied_total,
)
