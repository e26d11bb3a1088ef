"""Progress channel between the extractor (producer) and the UI layer (consumer)."""

import queue
from abc import ABC, abstractmethod
from collections.abc import Callable

from intake.extraction.models import ProgressEvent

# 0 and 100 are reserved for "not started" and "done".
MIN_REPORTED_PERCENT = 1
MAX_REPORTED_PERCENT = 99


def clamp_percent(value: float) -> int:
    return max(MIN_REPORTED_PERCENT, min(MAX_REPORTED_PERCENT, round(value)))


def fraction_to_percent(fraction: float) -> int:
    """Scale an engine's [0, 1] progress fraction to a reported percentage."""
    return clamp_percent(fraction * 100)


def page_percent(page_number: int, page_count: int, page_fraction: float) -> int:
    """Overall percentage while page `page_number` (1-based) of `page_count` is recognized."""
    return clamp_percent(((page_number - 1 + page_fraction) / page_count) * 100)


class ProgressReporter(ABC):
    """Receives progress events pushed by the extractor."""

    @abstractmethod
    def report(self, event: ProgressEvent) -> None:
        """Deliver one event. Implementations must not raise."""


class NullProgressReporter(ProgressReporter):
    def report(self, event: ProgressEvent) -> None:
        return None


class CallbackProgressReporter(ProgressReporter):
    """Forwards events to a plain callable, e.g. a UI update hook."""

    def __init__(self, callback: Callable[[ProgressEvent], None]) -> None:
        self._callback = callback

    def report(self, event: ProgressEvent) -> None:
        self._callback(event)


class QueueProgressReporter(ProgressReporter):
    """Bounded queue of progress events drained by the consumer.

    When the consumer falls behind, the oldest event is discarded so the
    latest progress is always available.
    """

    def __init__(self, maxsize: int = 32) -> None:
        if maxsize < 1:
            raise ValueError("maxsize must be at least 1")
        self._queue: queue.Queue[ProgressEvent] = queue.Queue(maxsize=maxsize)

    def report(self, event: ProgressEvent) -> None:
        while True:
            try:
                self._queue.put_nowait(event)
                return
            except queue.Full:
                try:
                    self._queue.get_nowait()
                except queue.Empty:
                    continue

    def drain(self) -> list[ProgressEvent]:
        """Return and remove every queued event, oldest first."""
        events: list[ProgressEvent] = []
        while True:
            try:
                events.append(self._queue.get_nowait())
            except queue.Empty:
                return events

    def get(self, timeout: float | None = None) -> ProgressEvent | None:
        """Block for the next event; None when the timeout expires."""
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
