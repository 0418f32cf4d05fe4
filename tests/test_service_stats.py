from datetime import datetime, timedelta
from statistics import mean

import pytest

from nezha.service_stats import (
    HistoryRecord,
    MonthlyStats,
    ServiceResponseItem,
    TodayStats,
)

TODAY = datetime(2024, 6, 15)


def _stats(*ids):
    stats = MonthlyStats()
    for service_id in ids:
        stats.add_service(service_id)
    return stats


def _consistent(item: ServiceResponseItem) -> bool:
    return item.total_up == sum(item.up) and item.total_down == sum(item.down)


def test_today_stats_record_counts_and_mean_delay():
    stats = TodayStats()
    delays = [12.0, 30.0, 18.0]
    for d in delays:
        stats.record(True, d)
    stats.record(False)
    stats.record(False, 999.0)
    assert stats.up == len(delays)
    assert stats.down == 2
    assert stats.delay == pytest.approx(mean(delays))


def test_add_service_starts_with_thirty_empty_days():
    stats = _stats(7)
    item = stats.items[7]
    assert len(item.up) == 30 and len(item.down) == 30 and len(item.delay) == 30
    assert sum(item.up) == 0 and sum(item.down) == 0
    assert stats.today[7].up == 0


def test_add_service_keeps_existing_figures():
    stats = _stats(1)
    stats.items[1].up[3] = 5
    stats.add_service(1)
    assert stats.items[1].up[3] == 5


def test_remove_service():
    stats = _stats(1, 2)
    stats.remove_service(1)
    stats.remove_service(99)
    assert list(stats.items) == [2]
    assert list(stats.today) == [2]


def test_load_history_places_records_by_day():
    stats = _stats(1)
    records = [
        HistoryRecord(1, TODAY - timedelta(hours=23), avg_delay=10.0, up=4, down=1),
        HistoryRecord(1, TODAY - timedelta(days=1, hours=23), avg_delay=20.0, up=2, down=3),
    ]
    stats.load_history(records, TODAY)
    item = stats.items[1]
    assert item.up[28] == 4 and item.down[28] == 1
    assert item.up[27] == 2 and item.down[27] == 3
    assert item.delay[28] == pytest.approx(10.0)
    assert item.up[29] == 0
    assert _consistent(item)


def test_load_history_ignores_records_outside_window_and_unknown_services():
    stats = _stats(1)
    records = [
        HistoryRecord(1, TODAY, up=9),
        HistoryRecord(1, TODAY + timedelta(hours=2), up=9),
        HistoryRecord(1, TODAY - timedelta(days=29), up=9),
        HistoryRecord(2, TODAY - timedelta(hours=3), up=9),
    ]
    stats.load_history(records, TODAY)
    assert stats.items[1].total_up == 0
    assert sum(stats.items[1].up) == 0
    assert 2 not in stats.items


def test_load_history_averages_delay_within_a_day():
    stats = _stats(1, 2)
    delays = [10.0, 40.0, 25.0]
    records = [
        HistoryRecord(1, TODAY - timedelta(hours=h), avg_delay=d, up=1)
        for h, d in zip((2, 5, 9), delays)
    ]
    records.append(HistoryRecord(2, TODAY - timedelta(hours=4), avg_delay=500.0, up=1))
    stats.load_history(records, TODAY)
    assert stats.items[1].delay[28] == pytest.approx(mean(delays))
    assert stats.items[2].delay[28] == pytest.approx(500.0)


def test_load_today_and_refresh_fill_last_slot_without_double_counting():
    stats = _stats(1)
    stats.load_history([HistoryRecord(1, TODAY - timedelta(hours=5), up=3, down=1)], TODAY)
    stats.load_today(
        [
            HistoryRecord(1, TODAY + timedelta(hours=1), avg_delay=8.0, up=6, down=2),
            HistoryRecord(1, TODAY + timedelta(hours=2), avg_delay=16.0, up=1, down=0),
        ]
    )
    assert stats.today[1].up == 7
    assert stats.today[1].delay == pytest.approx(mean([8.0, 16.0]))

    items = stats.refresh({}, {})
    item = items[1]
    assert item.up[29] == stats.today[1].up
    assert item.down[29] == stats.today[1].down
    assert item.delay[29] == pytest.approx(stats.today[1].delay)
    assert _consistent(item)

    first_total = item.total_up
    stats.refresh({}, {})
    assert stats.items[1].total_up == first_total
    assert _consistent(stats.items[1])


def test_refresh_picks_up_new_probes_and_current_counts():
    stats = _stats(1, 2)
    stats.refresh({}, {})
    stats.today[1].record(True, 5.0)
    stats.today[1].record(False)
    items = stats.refresh({1: 12, 3: 4}, {1: 2})
    assert items[1].up[29] == 1 and items[1].down[29] == 1
    assert items[1].current_up == 12
    assert items[1].current_down == 2
    assert items[2].current_up == 0
    assert 3 not in items
    assert all(_consistent(item) for item in items.values())


def test_roll_day_shifts_slots_and_clears_today():
    stats = _stats(1)
    item = stats.items[1]
    item.up[0] = 5
    item.down[0] = 2
    item.up[15] = 3
    item.total_up = 8
    item.total_down = 2
    stats.today[1].record(True, 7.0)
    stats.today[1].record(False)

    stats.roll_day()

    item = stats.items[1]
    assert item.up[14] == 3
    assert item.up[28] == 1 and item.down[28] == 1
    assert item.delay[28] == pytest.approx(7.0)
    assert item.up[29] == 0 and item.down[29] == 0 and item.delay[29] == 0.0
    assert len(item.up) == 30
    assert _consistent(item)
    assert stats.today[1] == TodayStats()


def test_roll_day_then_refresh_stays_consistent():
    stats = _stats(1)
    for _ in range(3):
        stats.today[1].record(True, 1.0)
        stats.refresh({}, {})
        stats.roll_day()
    stats.today[1].record(False)
    stats.refresh({}, {})
    item = stats.items[1]
    assert item.up[26:29] == [1, 1, 1]
    assert item.down[29] == 1
    assert _consistent(item)


def test_roll_day_drops_oldest_after_thirty_days():
    stats = _stats(1)
    stats.today[1].record(True, 2.0)
    for _ in range(30):
        stats.roll_day()
    item = stats.items[1]
    assert sum(item.up) == 0
    assert item.total_up == 0
    assert _consistent(item)