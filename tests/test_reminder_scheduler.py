from __future__ import annotations

import asyncio
from datetime import datetime, timedelta

from conftest import NOW, RecordingNotificationCenter
from records import HydrationSettings, HydrationSlot
from reminder_scheduler import AsyncioNotificationCenter, NotificationCenter, ReminderScheduler


def _slot(hour: int, minute: int = 0, amount: str = "500ml", done: bool = False) -> HydrationSlot:
    return HydrationSlot(amount=amount, scheduled_time=NOW.replace(hour=hour, minute=minute), is_completed=done)


class DeferredPermissionCenter(RecordingNotificationCenter):
    """Holds permission callbacks until the test answers them"""

    def __init__(self) -> None:
        super().__init__()
        self.callbacks = []

    def request_permission(self, callback) -> None:
        self.callbacks.append(callback)


def test_schedules_future_open_slots_with_lead_time(scheduler, center) -> None:
    slots = [_slot(8, done=False), _slot(12), _slot(14, amount="300ml"), _slot(16, done=True)]

    scheduler.reschedule(slots, HydrationSettings(), NOW)

    assert set(center.scheduled) == {slots[1].id, slots[2].id}
    noon = center.scheduled[slots[1].id]
    assert noon.fire_time == NOW.replace(hour=11, minute=45)
    assert noon.title == "Hydration Reminder"
    assert noon.body == "Time to drink 500ml of water!"
    assert noon.sound
    assert center.scheduled[slots[2].id].body == "Time to drink 300ml of water!"


def test_skips_reminders_whose_fire_time_has_passed(scheduler, center) -> None:
    slots = [_slot(10, 10), _slot(10, 20)]

    scheduler.reschedule(slots, HydrationSettings(reminder_lead_minutes=15), NOW)

    assert set(center.scheduled) == {slots[1].id}
    assert center.scheduled[slots[1].id].fire_time == NOW.replace(minute=5)


def test_sound_follows_settings(scheduler, center) -> None:
    slot = _slot(12)

    scheduler.reschedule([slot], HydrationSettings(sound_enabled=False), NOW)

    assert not center.scheduled[slot.id].sound


def test_reschedule_always_cancels_previous_reminders(scheduler, center) -> None:
    slot = _slot(12)
    scheduler.reschedule([slot], HydrationSettings(), NOW)

    scheduler.reschedule([], HydrationSettings(), NOW)

    assert center.cancel_calls == 2
    assert center.scheduled == {}


def test_denied_permission_schedules_nothing() -> None:
    center = RecordingNotificationCenter(granted=False)

    ReminderScheduler(center).reschedule([_slot(12), _slot(14)], HydrationSettings(), NOW)

    assert center.cancel_calls == 1
    assert center.scheduled == {}


def test_late_permission_answer_uses_snapshot_of_slots() -> None:
    center = DeferredPermissionCenter()
    slot = _slot(12)
    slots = [slot]
    ReminderScheduler(center).reschedule(slots, HydrationSettings(), NOW)

    slots.append(_slot(14))
    slot.is_completed = True
    center.callbacks[0](True)

    assert set(center.scheduled) == {slot.id}


def test_stale_permission_answer_is_ignored() -> None:
    center = DeferredPermissionCenter()
    scheduler = ReminderScheduler(center)
    first, second = _slot(12), _slot(14)

    scheduler.reschedule([first], HydrationSettings(), NOW)
    scheduler.reschedule([second], HydrationSettings(), NOW)
    center.callbacks[0](True)
    center.callbacks[1](True)

    assert set(center.scheduled) == {second.id}


def test_cancel_pending_request_drops_answer() -> None:
    center = DeferredPermissionCenter()
    scheduler = ReminderScheduler(center)

    scheduler.reschedule([_slot(12)], HydrationSettings(), NOW)
    scheduler.cancel_pending_request()
    center.callbacks[0](True)

    assert center.scheduled == {}


def test_base_center_is_abstract() -> None:
    center = NotificationCenter()

    for call in (lambda: center.request_permission(print), center.cancel_all,
                 lambda: center.schedule_at("id", NOW, "t", "b")):
        try:
            call()
        except NotImplementedError:
            continue
        raise AssertionError("expected NotImplementedError")


def test_asyncio_center_delivers_on_the_loop() -> None:
    delivered = []

    async def scenario() -> None:
        center = AsyncioNotificationCenter(delivered.append)
        granted = []
        center.request_permission(granted.append)
        await asyncio.sleep(0)
        assert granted == [True]

        fire_time = datetime.now().astimezone() + timedelta(milliseconds=50)
        center.schedule_at("slot-1", fire_time, "Hydration Reminder", "Time to drink 300ml of water!")
        center.schedule_at("slot-2", fire_time + timedelta(hours=1), "Hydration Reminder", "later")
        assert set(center.pending) == {"slot-1", "slot-2"}

        await asyncio.sleep(0.3)
        assert set(center.pending) == {"slot-2"}
        center.cancel_all()
        assert center.pending == {}

    asyncio.run(scenario())

    assert [notification.identifier for notification in delivered] == ["slot-1"]


def test_asyncio_center_rescheduling_same_id_replaces_it() -> None:
    delivered = []

    async def scenario() -> None:
        center = AsyncioNotificationCenter(delivered.append)
        soon = datetime.now().astimezone() + timedelta(milliseconds=50)
        center.schedule_at("slot-1", soon, "Hydration Reminder", "first")
        center.schedule_at("slot-1", soon + timedelta(hours=1), "Hydration Reminder", "second")
        await asyncio.sleep(0.2)
        center.cancel_all()

    asyncio.run(scenario())

    assert delivered == []


def test_asyncio_center_answers_permission_without_loop() -> None:
    answers = []

    AsyncioNotificationCenter(lambda notification: None, permission_granted=False).request_permission(answers.append)

    assert answers == [False]


def test_closing_one_view_keeps_another_views_request() -> None:
    center = DeferredPermissionCenter()
    scheduler = ReminderScheduler(center)
    first_view, second_view = object(), object()
    slot = _slot(12)

    scheduler.reschedule([_slot(14)], HydrationSettings(), NOW, owner=first_view)
    scheduler.reschedule([slot], HydrationSettings(), NOW, owner=second_view)
    scheduler.cancel_pending_request(owner=first_view)
    center.callbacks[1](True)

    assert set(center.scheduled) == {slot.id}


def test_closing_the_requesting_view_drops_its_answer() -> None:
    center = DeferredPermissionCenter()
    scheduler = ReminderScheduler(center)
    view = object()

    scheduler.reschedule([_slot(12)], HydrationSettings(), NOW, owner=view)
    scheduler.cancel_pending_request(owner=view)
    center.callbacks[0](True)

    assert center.scheduled == {}
