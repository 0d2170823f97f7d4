from __future__ import annotations

from datetime import datetime, timedelta, timezone

from time_service import TimeService, parse_api_response

SYSTEM_NOW = datetime(2026, 2, 16, 9, 0, 0, 250000, tzinfo=timezone.utc)


def _service(now: datetime = SYSTEM_NOW) -> TimeService:
    return TimeService(time_apis=[], system_clock=lambda: now)


def test_parse_known_responses() -> None:
    assert parse_api_response("http://worldclockapi.com/api/json/utc/now",
                              {"currentDateTime": "2026-02-16T09:00Z"}) == datetime(2026, 2, 16, 9, tzinfo=timezone.utc)
    assert parse_api_response("https://worldtimeapi.org/api/timezone/Etc/UTC",
                              {"utc_datetime": "2026-02-16T09:00:30.500+00:00"}).second == 30


def test_parse_rejects_bad_payloads() -> None:
    assert parse_api_response("http://worldclockapi.com/api/json/utc/now", {}) is None
    assert parse_api_response("http://worldclockapi.com/api/json/utc/now", {"currentDateTime": "later"}) is None
    assert parse_api_response("http://example.com/time", {"currentDateTime": "2026-02-16T09:00Z"}) is None


def test_unsynced_clock_is_the_system_clock() -> None:
    assert _service().get_accurate_time() == SYSTEM_NOW.replace(microsecond=0)


def test_recent_offset_is_applied() -> None:
    service = _service()
    service.record_sync(SYSTEM_NOW + timedelta(seconds=90))

    assert service.api_time_offset == 90
    assert service.get_accurate_time() == SYSTEM_NOW.replace(microsecond=0) + timedelta(seconds=90)
    assert service.now().tzinfo is not None


def test_stale_offset_is_ignored() -> None:
    current = {"now": SYSTEM_NOW}
    service = TimeService(time_apis=[], system_clock=lambda: current["now"])
    service.record_sync(SYSTEM_NOW + timedelta(seconds=90))

    current["now"] = SYSTEM_NOW + timedelta(hours=2)

    assert service.get_accurate_time() == current["now"].replace(microsecond=0)
