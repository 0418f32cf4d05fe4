"""Service availability codes and the rolling window of recent probe results."""

from __future__ import annotations

import enum
import time
from dataclasses import dataclass
from typing import Any

CURRENT_STATUS_SIZE = 30
SAMPLE_INTERVAL = 30.0


class ServiceStatus(enum.IntEnum):
    NO_DATA = 1
    GOOD = 2
    LOW_AVAILABILITY = 3
    DOWN = 4


_STATUS_TEXT = {
    ServiceStatus.NO_DATA: "No Data",
    ServiceStatus.GOOD: "Good",
    ServiceStatus.LOW_AVAILABILITY: "Low Availability",
    ServiceStatus.DOWN: "Down",
}


@dataclass(frozen=True)
class TaskResult:
    """One probe result reported by an agent; delay is in milliseconds."""

    id: int
    type: int = 0
    delay: float = 0.0
    data: str = ""
    successful: bool = False


def status_code(percent: float) -> ServiceStatus:
    """Classify an availability percentage."""
    if percent == 0:
        return ServiceStatus.NO_DATA
    if percent > 95:
        return ServiceStatus.GOOD
    if percent > 80:
        return ServiceStatus.LOW_AVAILABILITY
    return ServiceStatus.DOWN


def status_to_string(code: int, localizer: Any = None) -> str:
    """Return the (translated) name of a status code; unknown codes give ""."""
    try:
        text = _STATUS_TEXT[ServiceStatus(code)]
    except ValueError:
        return ""
    return localizer.t(text) if localizer is not None else text


class CurrentWindow:
    """The most recent samples of a service, at most one stored every 30 seconds.

    Slots are overwritten in a ring; once every slot has been written since the
    last reset the window is full and its figures are due to be persisted.
    """

    def __init__(self, size: int = CURRENT_STATUS_SIZE, interval: float = SAMPLE_INTERVAL) -> None:
        if size <= 0:
            raise ValueError("window size must be positive")
        self.size = size
        self.interval = interval
        self.slots: list[TaskResult | None] = [None] * size
        self.index = 0
        self._next: float | None = None
        self.up = 0
        self.down = 0
        self.avg_delay = 0.0

    def record(self, result: TaskResult, now: float | None = None) -> bool:
        """Offer a result; return True if it was stored. The figures are recomputed either way."""
        if now is None:
            now = time.time()
        if self._next is None:
            self._next = now
        stored = False
        if self._next < now:
            self._next = now + self.interval
            self.slots[self.index] = result
            self.index += 1
            stored = True
        self._recompute()
        return stored

    def _recompute(self) -> None:
        counted = [slot for slot in self.slots if slot is not None and slot.id > 0]
        delays = [slot.delay for slot in counted if slot.successful]
        self.up = len(delays)
        self.down = len(counted) - self.up
        self.avg_delay = sum(delays) / len(delays) if delays else 0.0

    def up_percent(self) -> int:
        """Whole percentage of successful samples; 0 when there are none."""
        total = self.up + self.down
        if total == 0:
            return 0
        return self.up * 100 // total

    def is_full(self) -> bool:
        return self.index >= self.size

    def reset(self, now: float | None = None) -> None:
        """Start writing from the first slot again; stored samples are kept until overwritten."""
        self.index = 0
        self._next = time.time() if now is None else now