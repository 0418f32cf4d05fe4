import pytest

from nezha.i18n import Localizer
from nezha.status import (
    CurrentWindow,
    ServiceStatus,
    TaskResult,
    status_code,
    status_to_string,
)


@pytest.mark.parametrize(
    "percent, expected",
    [
        (0, ServiceStatus.NO_DATA),
        (100, ServiceStatus.GOOD),
        (96, ServiceStatus.GOOD),
        (95, ServiceStatus.LOW_AVAILABILITY),
        (81, ServiceStatus.LOW_AVAILABILITY),
        (80, ServiceStatus.DOWN),
        (1, ServiceStatus.DOWN),
    ],
)
def test_status_code_thresholds(percent, expected):
    assert status_code(percent) == expected


def test_status_code_accepts_float():
    assert status_code(95.5) == ServiceStatus.GOOD


def test_status_to_string_plain():
    assert status_to_string(ServiceStatus.GOOD) == "Good"
    assert status_to_string(ServiceStatus.LOW_AVAILABILITY) == "Low Availability"
    assert status_to_string(ServiceStatus.DOWN) == "Down"
    assert status_to_string(ServiceStatus.NO_DATA) == "No Data"


def test_status_to_string_unknown_code():
    assert status_to_string(0) == ""
    assert status_to_string(9) == ""


def test_status_to_string_translated():
    localizer = Localizer("xx", {"Down": "DOWN!"})
    assert status_to_string(ServiceStatus.DOWN, localizer) == "DOWN!"
    assert status_to_string(ServiceStatus.GOOD, localizer) == "Good"


def _ok(delay=10.0):
    return TaskResult(id=1, delay=delay, successful=True)


def _fail():
    return TaskResult(id=1, successful=False)


def test_first_result_only_starts_the_clock():
    window = CurrentWindow()
    assert window.record(_ok(), now=1000.0) is False
    assert window.index == 0
    assert window.up_percent() == 0


def test_results_within_interval_are_dropped():
    window = CurrentWindow()
    window.record(_ok(), now=1000.0)
    assert window.record(_ok(), now=1001.0) is True
    assert window.record(_ok(), now=1010.0) is False
    assert window.record(_ok(), now=1032.0) is True
    assert window.index == 2
    assert window.up == 2


def test_all_successful_gives_good():
    window = CurrentWindow()
    now = 0.0
    window.record(_ok(), now=now)
    for _ in range(5):
        now += 31
        window.record(_ok(), now=now)
    assert window.up_percent() == 100
    assert window.down == 0
    assert status_code(window.up_percent()) == ServiceStatus.GOOD


def test_all_failed_gives_down():
    window = CurrentWindow()
    now = 0.0
    window.record(_fail(), now=now)
    for _ in range(3):
        now += 31
        window.record(_fail(), now=now)
    assert window.up == 0
    assert window.down == 3
    assert window.avg_delay == 0.0
    assert status_code(window.up_percent()) == ServiceStatus.NO_DATA


def test_average_delay_covers_successes_only():
    window = CurrentWindow()
    window.record(_ok(), now=0.0)
    window.record(_ok(20.0), now=31.0)
    window.record(_ok(40.0), now=62.0)
    window.record(TaskResult(id=1, delay=1000.0, successful=False), now=93.0)
    assert window.avg_delay == pytest.approx(30.0)
    assert window.up + window.down == 3


def test_results_without_id_are_not_counted():
    window = CurrentWindow()
    window.record(_ok(), now=0.0)
    window.record(TaskResult(id=0, successful=True), now=31.0)
    assert window.index == 1
    assert window.up == 0 and window.down == 0


def test_window_fills_and_resets():
    window = CurrentWindow(size=3)
    now = 0.0
    window.record(_ok(), now=now)
    for _ in range(3):
        now += 31
        window.record(_ok(), now=now)
    assert window.is_full()
    window.reset(now)
    assert not window.is_full()
    assert window.index == 0
    # stored samples remain until overwritten
    assert window.up == 3
    assert window.record(_fail(), now=now) is False
    assert window.record(_fail(), now=now + 1) is True
    assert window.up == 2 and window.down == 1


def test_window_size_must_be_positive():
    with pytest.raises(ValueError):
        CurrentWindow(size=0)