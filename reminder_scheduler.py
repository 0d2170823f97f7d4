import asyncio
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional

from records import HydrationSettings, HydrationSlot

REMINDER_TITLE = "Hydration Reminder"


@dataclass
class ScheduledNotification:
    identifier: str
    fire_time: datetime
    title: str
    body: str
    sound: bool = False


class NotificationCenter:
    """Host facility for local notifications.

    request_permission reports the answer through a callback that is invoked
    on the event loop, never from a foreign thread.
    """

    def request_permission(self, callback: Callable[[bool], None]):
        raise NotImplementedError

    def cancel_all(self):
        raise NotImplementedError

    def schedule_at(self, identifier: str, fire_time: datetime, title: str, body: str,
                    sound: bool = False):
        raise NotImplementedError


class AsyncioNotificationCenter(NotificationCenter):
    """Notification center that fires reminders from the running asyncio loop"""

    def __init__(self, deliver: Callable[[ScheduledNotification], None],
                 permission_granted: bool = True,
                 clock: Optional[Callable[[], datetime]] = None,
                 audio=None):
        self._deliver = deliver
        self.permission_granted = permission_granted
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._audio = audio
        self._handles: Dict[str, asyncio.TimerHandle] = {}
        self.pending: Dict[str, ScheduledNotification] = {}

    def request_permission(self, callback: Callable[[bool], None]):
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            callback(self.permission_granted)
            return
        loop.call_soon(callback, self.permission_granted)

    def cancel_all(self):
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        self.pending.clear()

    def schedule_at(self, identifier: str, fire_time: datetime, title: str, body: str,
                    sound: bool = False):
        loop = asyncio.get_running_loop()
        delay = max(0.0, (fire_time - self._clock()).total_seconds())

        existing = self._handles.pop(identifier, None)
        if existing:
            existing.cancel()

        notification = ScheduledNotification(identifier, fire_time, title, body, sound)
        self.pending[identifier] = notification
        self._handles[identifier] = loop.call_later(delay, self._fire, notification)

    def _fire(self, notification: ScheduledNotification):
        self._handles.pop(notification.identifier, None)
        self.pending.pop(notification.identifier, None)
        print(f"🔔 {notification.title}: {notification.body}")

        try:
            self._deliver(notification)
        except Exception as e:
            print(f"Error delivering notification {notification.identifier}: {e}")

        if notification.sound and self._audio is not None:
            asyncio.create_task(self._audio.play_reminder_audio())


class ReminderScheduler:
    """Turns future, incomplete hydration slots into local notifications"""

    def __init__(self, center: NotificationCenter):
        self.center = center
        self._generation = 0
        self._owner = None

    def reschedule(self, slots: List[HydrationSlot], settings: HydrationSettings, now: datetime,
                   owner=None):
        """Replace every scheduled reminder with one per pending future slot"""
        self.center.cancel_all()
        self._generation += 1
        self._owner = owner
        generation = self._generation

        # Snapshot so later in-memory mutations cannot leak into this request
        pending = sorted(
            (replace(slot) for slot in slots if not slot.is_completed and slot.scheduled_time > now),
            key=lambda slot: slot.scheduled_time,
        )
        settings = replace(settings)

        def on_permission(granted: bool):
            if not granted or generation != self._generation:
                return
            for slot in pending:
                self._schedule_slot(slot, settings, now)

        self.center.request_permission(on_permission)

    def cancel_pending_request(self, owner=None):
        """Drop an in-flight permission answer, used when the owning view closes.

        With an owner, only a request made by that owner is dropped.
        """
        if owner is not None and owner is not self._owner:
            return
        self._generation += 1

    def _schedule_slot(self, slot: HydrationSlot, settings: HydrationSettings, now: datetime):
        fire_time = slot.scheduled_time - timedelta(minutes=settings.reminder_lead_minutes)
        if fire_time <= now:
            return
        self.center.schedule_at(
            slot.id,
            fire_time,
            REMINDER_TITLE,
            f"Time to drink {slot.amount} of water!",
            sound=settings.sound_enabled,
        )
