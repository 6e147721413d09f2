import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Dict, List, Optional

RetryCallback = Callable[[], Awaitable[None]]


@dataclass
class PendingRetry:
    task: asyncio.Task
    delay_seconds: float
    scheduled_at: datetime
    retry_at: datetime


class RetryScheduler:
    """
    One-shot retry timers keyed by uri.

    At most one timer is pending per uri: scheduling always cancels the
    previous one first. A timer removes itself from the pending set before it
    runs its callback, so the callback may schedule a new retry for the same
    uri without cancelling itself.
    """

    def __init__(self):
        self._pending: Dict[str, PendingRetry] = {}

    def schedule(self, uri: str, delay_seconds: float, callback: RetryCallback) -> PendingRetry:
        self.cancel(uri)

        now = datetime.now()
        task = asyncio.create_task(self._execute_retry(uri, delay_seconds, callback))
        pending = PendingRetry(
            task=task,
            delay_seconds=delay_seconds,
            scheduled_at=now,
            retry_at=now + timedelta(seconds=delay_seconds),
        )
        self._pending[uri] = pending

        logging.info(f"Scheduled mount retry for {uri} in {delay_seconds}s")
        return pending

    def cancel(self, uri: str) -> bool:
        pending = self._pending.pop(uri, None)
        if pending is None:
            return False

        pending.task.cancel()
        logging.debug(f"Cancelled pending retry for {uri}")
        return True

    async def cancel_all(self) -> int:
        """Cancel every pending retry and wait for the timers to finish."""
        pending = list(self._pending.values())
        self._pending.clear()

        for retry in pending:
            retry.task.cancel()
        if pending:
            await asyncio.gather(*(retry.task for retry in pending), return_exceptions=True)

        logging.info(f"Cancelled {len(pending)} pending mount retries")
        return len(pending)

    def get_pending(self, uri: str) -> Optional[PendingRetry]:
        return self._pending.get(uri)

    def has_pending(self, uri: str) -> bool:
        return uri in self._pending

    def pending_uris(self) -> List[str]:
        return list(self._pending)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def _execute_retry(self, uri: str, delay_seconds: float, callback: RetryCallback) -> None:
        await asyncio.sleep(delay_seconds)

        # Only remove our own entry; a newer timer may already have replaced it
        pending = self._pending.get(uri)
        if pending is not None and pending.task is asyncio.current_task():
            del self._pending[uri]

        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logging.error(f"Error in retry callback for {uri}: {e}", exc_info=True)
