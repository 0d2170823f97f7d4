from __future__ import annotations

import random
from datetime import datetime

import pytest

from persistent_storage import InMemoryStorage
from reminder_scheduler import NotificationCenter, ReminderScheduler, ScheduledNotification

# Monday morning, used as "now" unless a test says otherwise
NOW = datetime(2026, 2, 16, 10, 0)


class RecordingNotificationCenter(NotificationCenter):
    """Answers permission requests immediately and records what gets scheduled"""

    def __init__(self, granted: bool = True) -> None:
        self.granted = granted
        self.scheduled: dict[str, ScheduledNotification] = {}
        self.cancel_calls = 0

    def request_permission(self, callback) -> None:
        callback(self.granted)

    def cancel_all(self) -> None:
        self.cancel_calls += 1
        self.scheduled.clear()

    def schedule_at(self, identifier, fire_time, title, body, sound=False) -> None:
        self.scheduled[identifier] = ScheduledNotification(identifier, fire_time, title, body, sound)


class AlwaysRandom(random.Random):
    """randint stub: 0 backfills every past slot as completed, 1 leaves them open"""

    def __init__(self, value: int) -> None:
        super().__init__(0)
        self.value = value

    def randint(self, a: int, b: int) -> int:
        return self.value


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def center() -> RecordingNotificationCenter:
    return RecordingNotificationCenter()


@pytest.fixture
def scheduler(center: RecordingNotificationCenter) -> ReminderScheduler:
    return ReminderScheduler(center)
