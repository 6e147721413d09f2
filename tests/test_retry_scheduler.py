"""
Tests for RetryScheduler timers.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from automount.services.retry_scheduler import RetryScheduler


class TestRetryScheduler:
    @pytest.mark.asyncio
    async def test_callback_runs_after_delay_and_entry_is_removed(self):
        scheduler = RetryScheduler()
        callback = AsyncMock()

        scheduler.schedule("smb://nas/media", 0.01, callback)
        assert scheduler.has_pending("smb://nas/media")

        await asyncio.sleep(0.05)

        callback.assert_awaited_once()
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_rescheduling_replaces_previous_timer(self):
        scheduler = RetryScheduler()
        first = AsyncMock()
        second = AsyncMock()

        scheduler.schedule("smb://nas/media", 0.01, first)
        scheduler.schedule("smb://nas/media", 0.01, second)
        assert scheduler.pending_count == 1

        await asyncio.sleep(0.05)

        first.assert_not_awaited()
        second.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cancel_prevents_callback(self):
        scheduler = RetryScheduler()
        callback = AsyncMock()

        scheduler.schedule("smb://nas/media", 0.01, callback)
        assert scheduler.cancel("smb://nas/media") is True
        assert scheduler.cancel("smb://nas/media") is False

        await asyncio.sleep(0.05)
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_callback_can_reschedule_same_uri(self):
        scheduler = RetryScheduler()
        calls = []

        async def callback():
            calls.append(len(calls))
            if len(calls) < 3:
                scheduler.schedule("smb://nas/media", 0.01, callback)

        scheduler.schedule("smb://nas/media", 0.01, callback)
        await asyncio.sleep(0.2)

        assert calls == [0, 1, 2]
        assert scheduler.pending_count == 0

    @pytest.mark.asyncio
    async def test_failing_callback_is_logged_not_raised(self):
        scheduler = RetryScheduler()
        callback = AsyncMock(side_effect=RuntimeError("boom"))

        pending = scheduler.schedule("smb://nas/media", 0.01, callback)
        await asyncio.sleep(0.05)

        assert pending.task.done()
        assert pending.task.exception() is None

    @pytest.mark.asyncio
    async def test_cancel_all(self):
        scheduler = RetryScheduler()
        callback = AsyncMock()
        for uri in ("smb://a/x", "smb://b/y", "smb://c/z"):
            scheduler.schedule(uri, 10, callback)

        assert await scheduler.cancel_all() == 3
        assert scheduler.pending_count == 0
        callback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_pending_retry_records_timing(self):
        scheduler = RetryScheduler()
        pending = scheduler.schedule("smb://nas/media", 30, AsyncMock())

        assert pending.delay_seconds == 30
        assert (pending.retry_at - pending.scheduled_at).total_seconds() == 30
        assert scheduler.get_pending("smb://nas/media") is pending
        assert scheduler.pending_uris() == ["smb://nas/media"]

        await scheduler.cancel_all()
