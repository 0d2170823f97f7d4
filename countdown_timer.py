import asyncio
from typing import Callable, Optional


class CountdownTimer:
    """Training countdown that ticks once per second"""

    def __init__(self, duration_seconds: int, on_finished: Optional[Callable[[], None]] = None):
        self.duration_seconds = duration_seconds
        self.remaining_seconds = duration_seconds
        self.is_paused = False
        self.on_finished = on_finished
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def is_finished(self) -> bool:
        return self.remaining_seconds <= 0

    @property
    def formatted_time(self) -> str:
        hours = self.remaining_seconds // 3600
        minutes = (self.remaining_seconds % 3600) // 60
        seconds = self.remaining_seconds % 60
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    def tick(self):
        """Advance one second; a paused or finished timer does not move"""
        if self.is_paused or self.is_finished:
            return
        self.remaining_seconds -= 1
        if self.is_finished:
            print("Timer finished!")
            if self.on_finished:
                self.on_finished()

    def toggle_pause(self):
        self.is_paused = not self.is_paused

    async def _tick_loop(self):
        while not self.is_finished:
            try:
                await asyncio.sleep(1)
            except asyncio.CancelledError:
                break
            self.tick()

    def start(self):
        if not self.is_running and not self.is_finished:
            self._task = asyncio.create_task(self._tick_loop())

    async def stop(self):
        """Cancel the periodic tick, keeping the remaining time"""
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await asyncio.wait_for(self._task, timeout=2.0)
            except (asyncio.CancelledError, asyncio.TimeoutError):
                pass
        self._task = None
