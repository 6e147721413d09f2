import asyncio
import logging
from typing import Awaitable, Callable, Optional

TickCallback = Callable[[], Awaitable[object]]


class PeriodicTrigger:
    """
    Calls `on_tick` every `interval_minutes`, sleeping first.

    Errors raised by the callback are logged and the loop keeps going.
    reconfigure() restarts the loop with the new interval.
    """

    def __init__(self, on_tick: TickCallback, interval_minutes: float):
        self._on_tick = on_tick
        self._interval_minutes = interval_minutes
        self._is_running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def interval_minutes(self) -> float:
        return self._interval_minutes

    def is_running(self) -> bool:
        return self._is_running

    async def start(self) -> None:
        if self._is_running:
            logging.warning("Periodic mount check already running")
            return

        self._is_running = True
        self._task = asyncio.create_task(self._trigger_loop())
        logging.info(f"Periodic mount check started (every {self._interval_minutes} min)")

    async def stop(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logging.info("Periodic mount check stopped")

    async def reconfigure(self, interval_minutes: float) -> None:
        if interval_minutes == self._interval_minutes:
            return

        logging.info(
            f"Periodic mount check interval changed: "
            f"{self._interval_minutes} -> {interval_minutes} min"
        )
        was_running = self._is_running
        await self.stop()
        self._interval_minutes = interval_minutes
        if was_running:
            await self.start()

    async def _trigger_loop(self) -> None:
        try:
            while self._is_running:
                await asyncio.sleep(self._interval_minutes * 60)

                try:
                    await self._on_tick()
                except Exception as e:
                    logging.error(f"Error in periodic mount check: {e}", exc_info=True)

        except asyncio.CancelledError:
            logging.debug("Periodic mount check loop cancelled")
            raise
