import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

import aiohttp

WORLDCLOCK_API = "http://worldclockapi.com/api/json/utc/now"
# Offsets older than this are ignored and the system clock is used as is
OFFSET_MAX_AGE = timedelta(hours=1)


def _parse_utc(value: str) -> datetime:
    moment = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


# Response field holding the UTC timestamp, keyed by host
RESPONSE_FIELDS: Dict[str, str] = {
    "worldclockapi.com": "currentDateTime",
    "worldtimeapi.org": "utc_datetime",
}


class TimeService:
    """Wall clock used for reminder slots and calendar-day decisions.

    The system clock is trusted unless a sync against one of the time APIs
    finds it drifting, in which case the measured offset is applied for an
    hour after the sync.
    """

    def __init__(self, time_apis: Optional[List[str]] = None,
                 system_clock: Optional[Callable[[], datetime]] = None):
        self.time_apis = list(time_apis) if time_apis is not None else [WORLDCLOCK_API]
        self._system_clock = system_clock or (lambda: datetime.now(timezone.utc))
        self.api_time_offset = 0.0
        self.last_sync_time: Optional[datetime] = None

    async def sync_time(self) -> bool:
        """Measure the system clock offset against the first API that answers"""
        timeout = aiohttp.ClientTimeout(total=10, connect=5)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            for api_url in self.time_apis:
                api_time = await self._fetch(session, api_url)
                if api_time is not None:
                    self.record_sync(api_time)
                    print(f"✅ Clock synced with {api_url}, offset {self.api_time_offset:+.2f}s")
                    return True

        print("⚠️  Warning: no time API reachable, reminders use the system clock")
        self.last_sync_time = self._system_clock()
        self.api_time_offset = 0.0
        return False

    async def _fetch(self, session: aiohttp.ClientSession, api_url: str) -> Optional[datetime]:
        try:
            async with session.get(api_url, headers={'User-Agent': 'GoalFuel/1.0'}) as response:
                if response.status != 200:
                    print(f"❌ HTTP {response.status} from {api_url}")
                    return None
                return parse_api_response(api_url, await response.json(content_type=None))
        except asyncio.TimeoutError:
            print(f"⏱️ Timeout connecting to {api_url}")
        except aiohttp.ClientError as e:
            print(f"❌ Failed to reach {api_url}: {e}")
        return None

    def record_sync(self, api_time: datetime):
        system_time = self._system_clock()
        self.api_time_offset = (api_time - system_time).total_seconds()
        self.last_sync_time = system_time

    def get_accurate_time(self) -> datetime:
        """Current UTC time, corrected by a recent offset when there is one"""
        system_time = self._system_clock().replace(microsecond=0)
        if self.last_sync_time and self.api_time_offset:
            if system_time - self.last_sync_time < OFFSET_MAX_AGE:
                return system_time + timedelta(seconds=self.api_time_offset)
        return system_time

    def now(self) -> datetime:
        return self.get_accurate_time().astimezone()

    async def ensure_time_sync(self):
        """Sync once per process"""
        if not self.last_sync_time:
            await self.sync_time()


def parse_api_response(api_url: str, data: dict) -> Optional[datetime]:
    for host, field_name in RESPONSE_FIELDS.items():
        if host in api_url:
            try:
                return _parse_utc(data[field_name])
            except (KeyError, TypeError, ValueError) as e:
                print(f"Failed to parse response from {api_url}: {e}")
                return None
    print(f"Unknown time API {api_url}")
    return None


# Global time service instance
time_service = TimeService()
