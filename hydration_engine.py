"""Hydration state engine.

Pure functions implement the slot policies; HydrationEngine wraps them with
persistence and reminder rescheduling for a single hydration view.
"""
import random
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple, Union

from config import HydrationPolicy
from event_manager import Event
from hydration_schedule import generate_daily_slots, start_of_day
from persistent_storage import PersistentStorage
from records import HydrationSettings, HydrationSlot, SMALL_AMOUNT
from reminder_scheduler import ReminderScheduler


@dataclass(frozen=True)
class Accepted:
    slot: HydrationSlot
    created: bool = False


@dataclass(frozen=True)
class TooEarly:
    wait_minutes: int

    @property
    def message(self) -> str:
        return f"You need to wait {self.wait_minutes} minutes until your next water intake."


AddWaterOutcome = Union[Accepted, TooEarly]


def _same_day(moment: datetime, reference: datetime) -> bool:
    if moment.tzinfo is not None and reference.tzinfo is not None:
        moment = moment.astimezone(reference.tzinfo)
    return moment.date() == reference.date()


def slots_for_day(slots: List[HydrationSlot], now: datetime) -> List[HydrationSlot]:
    """Keep the slots scheduled on now's calendar day"""
    return [slot for slot in slots if _same_day(slot.scheduled_time, now)]


def total_consumed(slots: List[HydrationSlot]) -> float:
    """Liters consumed across completed slots"""
    return sum(slot.amount_ml / 1000.0 for slot in slots if slot.is_completed)


def mark_complete(slots: List[HydrationSlot], slot_id: str) -> List[HydrationSlot]:
    return [replace(slot, is_completed=True) if slot.id == slot_id else slot for slot in slots]


def next_pending(slots: List[HydrationSlot], now: datetime) -> Optional[HydrationSlot]:
    future = [slot for slot in slots if not slot.is_completed and slot.scheduled_time > now]
    return min(future, key=lambda slot: slot.scheduled_time) if future else None


def next_reminder(slots: List[HydrationSlot], now: datetime) -> Optional[datetime]:
    slot = next_pending(slots, now)
    return slot.scheduled_time if slot else None


def apply_add_water(slots: List[HydrationSlot], now: datetime,
                    policy: HydrationPolicy = HydrationPolicy()) -> Tuple[List[HydrationSlot], AddWaterOutcome]:
    """Quick-add a glass of water.

    The nearest future pending slot is checked first; when it is more than
    policy.too_early_minutes away the intake is refused. Otherwise the first
    pending slot within the match window (either direction) is completed, or
    an ad-hoc completed slot is appended.
    """
    upcoming = next_pending(slots, now)
    if upcoming is not None:
        wait_minutes = int((upcoming.scheduled_time - now).total_seconds() / 60) + 1
        if wait_minutes > policy.too_early_minutes:
            return list(slots), TooEarly(wait_minutes)

    window = timedelta(minutes=policy.match_window_minutes).total_seconds()
    for index, slot in enumerate(slots):
        if not slot.is_completed and abs((slot.scheduled_time - now).total_seconds()) < window:
            completed = replace(slot, is_completed=True)
            updated = list(slots)
            updated[index] = completed
            return updated, Accepted(completed, created=False)

    ad_hoc = HydrationSlot(amount=SMALL_AMOUNT, scheduled_time=now, is_completed=True)
    return list(slots) + [ad_hoc], Accepted(ad_hoc, created=True)


def format_time_remaining(target: datetime, now: datetime) -> str:
    seconds = int((target - now).total_seconds())
    if seconds <= 0:
        return "Now"
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    if hours > 0:
        return f"In {hours}h {minutes}m"
    return f"In {minutes}m"


class HydrationEngine:
    def __init__(self, storage: PersistentStorage,
                 scheduler: Optional[ReminderScheduler] = None,
                 policy: HydrationPolicy = HydrationPolicy(),
                 clock: Optional[Callable[[], datetime]] = None,
                 rng: Optional[random.Random] = None):
        self.storage = storage
        self.scheduler = scheduler
        self.policy = policy
        self._clock = clock or (lambda: datetime.now().astimezone())
        self.rng = rng or random.Random()

        self.slots: List[HydrationSlot] = []
        self.settings = HydrationSettings()
        self.total_consumed = 0.0
        self.next_reminder_time: Optional[datetime] = None

    def load(self, now: Optional[datetime] = None) -> List[HydrationSlot]:
        """Load today's slots, generating the day's schedule when none exist"""
        now = now or self._clock()
        self._reload(now)
        self.settings = self.storage.load_hydration_settings()
        self._refresh(now)
        return self.slots

    def sync(self, now: Optional[datetime] = None) -> bool:
        """Pick up slots saved by other views.

        Reminders are only rebuilt when the calendar day rolled over since the
        last load; returns True in that case.
        """
        now = now or self._clock()
        rolled_over = not slots_for_day(self.slots, now)
        self._reload(now)
        self.settings = self.storage.load_hydration_settings()
        if rolled_over:
            print(f"📅 New day, hydration schedule loaded for {now.date()}")
            self._refresh(now)
        else:
            self._recompute(now)
        return rolled_over

    def mark_complete(self, slot_id: str, now: Optional[datetime] = None) -> List[HydrationSlot]:
        now = now or self._clock()
        self._reload(now)
        if not any(slot.id == slot_id for slot in self.slots):
            self._recompute(now)
            return self.slots
        self.slots = mark_complete(self.slots, slot_id)
        self._save()
        self._refresh(now)
        return self.slots

    def add_water(self, now: Optional[datetime] = None) -> AddWaterOutcome:
        now = now or self._clock()
        self._reload(now)
        self.slots, outcome = apply_add_water(self.slots, now, self.policy)
        if isinstance(outcome, TooEarly):
            self._recompute(now)
            print(f"⏳ Too early for water, next intake in {outcome.wait_minutes} min")
            return outcome

        self._save()
        self._refresh(now)
        print(f"💧 Logged {outcome.slot.amount} ({'ad hoc' if outcome.created else 'scheduled'}), total {self.total_consumed:.1f}L")
        return outcome

    def save_settings(self, settings: HydrationSettings, now: Optional[datetime] = None):
        self.settings = settings
        self.storage.save_hydration_settings(settings)
        self._refresh(now or self._clock())

    def on_data_reset(self, event: Optional[Event] = None):
        # The first view to react generates and saves the new day, the rest adopt it
        now = self._clock()
        self.slots = []
        self._reload(now)
        self.settings = self.storage.load_hydration_settings()
        self._refresh(now)
        print(f"🔄 Hydration schedule reloaded with {len(self.slots)} slots")

    def timeline(self) -> List[HydrationSlot]:
        return sorted(self.slots, key=lambda slot: slot.scheduled_time)

    def slot_status(self, slot: HydrationSlot, now: Optional[datetime] = None) -> str:
        return slot.status(now or self._clock(), self.policy.overdue_minutes)

    def progress(self) -> float:
        if self.settings.daily_goal_liters <= 0:
            return 0.0
        return min(1.0, self.total_consumed / self.settings.daily_goal_liters)

    def _reload(self, now: datetime):
        """Replace in-memory slots with the stored ones for now's day"""
        self.slots = slots_for_day(self.storage.load_hydration_slots(), now)
        if not self.slots:
            self._create_daily_slots(now)

    def _create_daily_slots(self, now: datetime):
        self.slots = generate_daily_slots(start_of_day(now), now, self.rng)
        self._save()

    def _save(self):
        if not self.storage.save_hydration_slots(self.slots):
            print("⚠️ Hydration entries not saved, keeping in-memory state")

    def _recompute(self, now: datetime):
        self.total_consumed = total_consumed(self.slots)
        self.next_reminder_time = next_reminder(self.slots, now)

    def _refresh(self, now: datetime):
        self._recompute(now)
        if self.scheduler is not None:
            self.scheduler.reschedule(self.slots, self.settings, now, owner=self)
