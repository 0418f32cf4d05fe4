"""Thirty-day availability figures of monitored services, kept one slot per day."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta

DAYS = 30


def _zeros_float() -> list[float]:
    return [0.0] * DAYS


def _zeros_int() -> list[int]:
    return [0] * DAYS


@dataclass
class TodayStats:
    """Today's counts of successful and failed probes and the mean delay of the successful ones."""

    up: int = 0
    down: int = 0
    delay: float = 0.0

    def record(self, successful: bool, delay: float = 0.0) -> None:
        if successful:
            self.delay = (self.delay * self.up + delay) / (self.up + 1)
            self.up += 1
        else:
            self.down += 1

    def clear(self) -> None:
        self.up = 0
        self.down = 0
        self.delay = 0.0


@dataclass
class ServiceResponseItem:
    """Per-day figures of one service; the last slot is today."""

    service_name: str = ""
    current_up: int = 0
    current_down: int = 0
    total_up: int = 0
    total_down: int = 0
    delay: list[float] = field(default_factory=_zeros_float)
    up: list[int] = field(default_factory=_zeros_int)
    down: list[int] = field(default_factory=_zeros_int)


@dataclass(frozen=True)
class HistoryRecord:
    """A persisted summary of a service's probes; avg_delay is in milliseconds."""

    service_id: int
    created_at: datetime
    avg_delay: float = 0.0
    up: int = 0
    down: int = 0
    server_id: int = 0


class MonthlyStats:
    """The thirty-day figures and today's running counts of every known service."""

    def __init__(self) -> None:
        self.items: dict[int, ServiceResponseItem] = {}
        self.today: dict[int, TodayStats] = {}

    def add_service(self, service_id: int) -> ServiceResponseItem:
        """Start tracking a service; an already tracked one keeps its figures."""
        item = self.items.setdefault(service_id, ServiceResponseItem())
        self.today.setdefault(service_id, TodayStats())
        return item

    def remove_service(self, service_id: int) -> None:
        self.items.pop(service_id, None)
        self.today.pop(service_id, None)

    def load_history(self, records: Iterable[HistoryRecord], today: datetime) -> None:
        """Fold the records of the 29 days before today into the daily slots.

        Records outside that window or of unknown services are ignored.
        """
        window_start = today - timedelta(days=29)
        delay_count: dict[tuple[int, int], int] = defaultdict(int)
        for rec in records:
            item = self.items.get(rec.service_id)
            if item is None or not (window_start < rec.created_at < today):
                continue
            hours = int((today - rec.created_at).total_seconds() // 3600)
            day_index = DAYS - 2 - hours // 24
            if day_index < 0:
                continue
            count = delay_count[(rec.service_id, day_index)]
            item.delay[day_index] = (item.delay[day_index] * count + rec.avg_delay) / (count + 1)
            delay_count[(rec.service_id, day_index)] = count + 1
            item.up[day_index] += rec.up
            item.total_up += rec.up
            item.down[day_index] += rec.down
            item.total_down += rec.down

    def load_today(self, records: Iterable[HistoryRecord]) -> None:
        """Fold today's records into today's counts and the totals."""
        total_delay: dict[int, float] = defaultdict(float)
        delay_count: dict[int, int] = defaultdict(int)
        for rec in records:
            item = self.items.get(rec.service_id)
            stats = self.today.get(rec.service_id)
            if item is None or stats is None:
                continue
            total_delay[rec.service_id] += rec.avg_delay
            delay_count[rec.service_id] += 1
            stats.up += rec.up
            item.total_up += rec.up
            stats.down += rec.down
            item.total_down += rec.down
        for service_id, delay in total_delay.items():
            self.today[service_id].delay = delay / delay_count[service_id]

    def _fold_today(self) -> None:
        last = DAYS - 1
        for service_id, item in self.items.items():
            stats = self.today.get(service_id)
            if stats is None:
                continue
            # Take back what the previous fold added before adding today's counts.
            item.total_up += stats.up - item.up[last]
            item.total_down += stats.down - item.down[last]
            item.up[last] = stats.up
            item.down[last] = stats.down
            item.delay[last] = stats.delay

    def refresh(
        self,
        current_up: Mapping[int, int],
        current_down: Mapping[int, int],
    ) -> dict[int, ServiceResponseItem]:
        """Copy today's counts into the last slot, set the current window counts and return the items."""
        self._fold_today()
        for service_id, value in current_down.items():
            item = self.items.get(service_id)
            if item is not None:
                item.current_down = value
        for service_id, value in current_up.items():
            item = self.items.get(service_id)
            if item is not None:
                item.current_up = value
        return self.items

    def roll_day(self) -> None:
        """Move every slot back one day, dropping the oldest, and start a new today."""
        self._fold_today()
        for service_id, item in self.items.items():
            item.total_up -= item.up[0]
            item.total_down -= item.down[0]
            item.up = item.up[1:] + [0]
            item.down = item.down[1:] + [0]
            item.delay = item.delay[1:] + [0.0]
            item.current_up = 0
            item.current_down = 0
            stats = self.today.get(service_id)
            if stats is not None:
                stats.clear()