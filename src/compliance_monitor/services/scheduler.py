import asyncio
import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


def next_run_time(interval_minutes: int = 20, now: Optional[datetime] = None) -> datetime:
    """Next wall-clock minute divisible by the interval (cron */N)."""
    now = now or datetime.now()
    run = now.replace(second=0, microsecond=0) + timedelta(minutes=1)
    while run.minute % interval_minutes:
        run += timedelta(minutes=1)
    return run


class PeriodicScheduler:
    """
    Runs a coroutine on every */N minute boundary.
    stop() lets an in-flight job finish before returning.
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[object]],
        interval_minutes: int = 20,
        run_on_startup: bool = True,
        clock: Callable[[], datetime] = datetime.now,
    ):
        if interval_minutes <= 0:
            raise ValueError("interval_minutes must be positive")
        self.job = job
        self.interval_minutes = interval_minutes
        self.run_on_startup = run_on_startup
        self.clock = clock
        self.next_run_at: Optional[datetime] = None
        self._stop = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._task = asyncio.create_task(self._loop(), name="compliance-scheduler")
        logger.info(f"Scheduler started, interval={self.interval_minutes}m")

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        self.next_run_at = None
        logger.info("Scheduler stopped")

    async def _tick(self) -> None:
        try:
            await self.job()
        except Exception as e:
            logger.exception(f"Scheduled run failed: {e}")

    async def _loop(self) -> None:
        if self.run_on_startup:
            await self._tick()

        while not self._stop.is_set():
            self.next_run_at = next_run_time(self.interval_minutes, self.clock())
            delay = max((self.next_run_at - self.clock()).total_seconds(), 0)
            try:
                await asyncio.wait_for(self._stop.wait(), timeout=delay)
                break
            except asyncio.TimeoutError:
                pass
            await self._tick()
