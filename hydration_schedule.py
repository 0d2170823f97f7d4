import random
from datetime import datetime
from typing import List, Optional

from records import HydrationSlot, LARGE_AMOUNT, SMALL_AMOUNT

# Reminder hours, every two hours from 7:00 to 22:00 plus an early 8:00 slot
DAILY_HOURS = (7, 8, 10, 12, 14, 16, 18, 20, 22)


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def amount_for_hour(hour: int) -> str:
    return LARGE_AMOUNT if hour % 2 == 0 else SMALL_AMOUNT


def generate_daily_slots(day_start: datetime, now: datetime,
                         rng: Optional[random.Random] = None) -> List[HydrationSlot]:
    """Build the fixed reminder schedule for the day starting at day_start.

    Slots that are already in the past at generation time are backfilled as
    completed with a 50% chance each, drawn from rng. Future slots always
    start incomplete.
    """
    rng = rng or random.Random()
    slots = []
    for hour in DAILY_HOURS:
        scheduled_time = day_start.replace(hour=hour, minute=0, second=0, microsecond=0)
        is_completed = scheduled_time < now and rng.randint(0, 1) == 0
        slots.append(HydrationSlot(
            amount=amount_for_hour(hour),
            scheduled_time=scheduled_time,
            is_completed=is_completed,
        ))
    return slots
