from datetime import datetime, timedelta

import pytest

from groupfun.sleep import (
    SleepRegistry,
    good_morning_text,
    good_night_text,
    is_evening,
    is_morning,
    split_duration,
)

NIGHT = datetime(2022, 8, 1, 22, 30, 15)


@pytest.fixture
def registry(tmp_path):
    reg = SleepRegistry(tmp_path / "sleep.db")
    yield reg
    reg.close()


def test_first_sleep_has_no_duration(registry):
    assert registry.sleep(10, 1, NIGHT) == (1, timedelta(0))


def test_sleep_positions_grow(registry):
    registry.sleep(10, 1, NIGHT)
    position, _ = registry.sleep(10, 2, NIGHT + timedelta(minutes=5))
    assert position == 2


def test_groups_are_separate(registry):
    registry.sleep(10, 1, NIGHT)
    position, _ = registry.sleep(11, 2, NIGHT + timedelta(minutes=5))
    assert position == 1


def test_repeated_sleep_reports_awake_time(registry):
    registry.sleep(10, 1, NIGHT)
    later = NIGHT + timedelta(minutes=42)
    position, awake = registry.sleep(10, 1, later)
    assert awake == later - NIGHT
    assert position == 1


def test_sleep_before_the_evening_window_is_not_counted(registry):
    registry.sleep(10, 1, datetime(2022, 7, 31, 23, 0))
    position, _ = registry.sleep(10, 2, NIGHT)
    assert position == 1


def test_get_up_reports_sleep_time(registry):
    registry.sleep(10, 1, NIGHT)
    morning = datetime(2022, 8, 2, 7, 45)
    position, slept = registry.get_up(10, 1, morning)
    assert slept == morning - NIGHT
    assert position == 1


def test_records_survive_reopen(tmp_path):
    path = tmp_path / "sleep.db"
    with SleepRegistry(path) as reg:
        reg.sleep(10, 1, NIGHT)
    with SleepRegistry(path) as reg:
        later = NIGHT + timedelta(hours=1)
        _, awake = reg.sleep(10, 1, later)
        assert awake == timedelta(hours=1)


def test_split_duration():
    assert split_duration(timedelta(hours=1, minutes=2, seconds=3)) == (1, 2, 3)
    assert split_duration(timedelta(0)) == (0, 0, 0)


def test_split_duration_recombines():
    delta = timedelta(hours=30, minutes=59, seconds=59, microseconds=999)
    hours, minutes, seconds = split_duration(delta)
    assert timedelta(hours=hours, minutes=minutes, seconds=seconds) == delta - timedelta(microseconds=999)


@pytest.mark.parametrize("hour, expected", [(5, False), (6, True), (12, True), (13, False)])
def test_is_morning(hour, expected):
    assert is_morning(hour) is expected


@pytest.mark.parametrize("hour, expected", [(3, True), (4, False), (20, False), (21, True)])
def test_is_evening(hour, expected):
    assert is_evening(hour) is expected


def test_good_morning_text_without_duration():
    assert good_morning_text(3, timedelta(0)) == "早安成功！你是今天第3个起床的"
    assert good_morning_text(3, timedelta(hours=24)) == "早安成功！你是今天第3个起床的"


def test_good_morning_text_with_duration():
    text = good_morning_text(3, timedelta(hours=1, minutes=2, seconds=3))
    assert text == "早安成功！你的睡眠时长为1时2分3秒,你是今天第3个起床的"


def test_good_night_texts():
    assert good_night_text(2, timedelta(0)) == "晚安成功！你是今天第2个睡觉的"
    text = good_night_text(2, timedelta(hours=1, minutes=2, seconds=3))
    assert text == "晚安成功！你的清醒时长为1时2分3秒,你是今天第2个睡觉的"