from __future__ import annotations

import random
from datetime import datetime, timedelta

from conftest import AlwaysRandom, NOW
from hydration_schedule import DAILY_HOURS, amount_for_hour, generate_daily_slots, start_of_day


def test_generates_one_slot_per_fixed_hour() -> None:
    slots = generate_daily_slots(start_of_day(NOW), NOW, random.Random(1))

    assert [slot.scheduled_time.hour for slot in slots] == [7, 8, 10, 12, 14, 16, 18, 20, 22]
    assert all(slot.scheduled_time.date() == NOW.date() for slot in slots)
    assert all(slot.scheduled_time.minute == 0 for slot in slots)
    assert len({slot.id for slot in slots}) == 9


def test_even_hours_get_the_larger_amount() -> None:
    slots = generate_daily_slots(start_of_day(NOW), NOW, random.Random(1))

    for slot in slots:
        expected = "500ml" if slot.scheduled_time.hour % 2 == 0 else "300ml"
        assert slot.amount == expected
    assert amount_for_hour(7) == "300ml"
    assert amount_for_hour(22) == "500ml"


def test_future_slots_start_incomplete_even_when_rng_says_complete() -> None:
    now = NOW.replace(hour=10, minute=30)
    slots = generate_daily_slots(start_of_day(now), now, AlwaysRandom(0))

    completed_hours = [slot.scheduled_time.hour for slot in slots if slot.is_completed]
    assert completed_hours == [7, 8, 10]


def test_past_slots_stay_open_when_rng_declines() -> None:
    now = NOW.replace(hour=23)
    slots = generate_daily_slots(start_of_day(now), now, AlwaysRandom(1))

    assert not any(slot.is_completed for slot in slots)


def test_backfill_is_reproducible_with_a_seed() -> None:
    now = NOW.replace(hour=23)
    first = generate_daily_slots(start_of_day(now), now, random.Random(42))
    second = generate_daily_slots(start_of_day(now), now, random.Random(42))

    assert [slot.is_completed for slot in first] == [slot.is_completed for slot in second]


def test_schedule_before_first_slot_has_no_history() -> None:
    early = start_of_day(NOW) + timedelta(hours=6)
    slots = generate_daily_slots(start_of_day(early), early, AlwaysRandom(0))

    assert not any(slot.is_completed for slot in slots)
    assert DAILY_HOURS[0] == 7


def test_generation_keeps_time_zone_of_day_start() -> None:
    from datetime import timezone

    now = datetime(2026, 2, 16, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    slots = generate_daily_slots(start_of_day(now), now, random.Random(3))

    assert all(slot.scheduled_time.tzinfo == now.tzinfo for slot in slots)
