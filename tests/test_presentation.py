"""
Tests for the WebSocket presentation layer.
"""

import json
from unittest.mock import AsyncMock, Mock

import pytest

from automount.core.events.mount_events import (
    MountFailedRetryingEvent,
    NotificationRequestedEvent,
    StatusChangedEvent,
)
from automount.domains.presentation.event_handlers import PresentationEventHandlers
from automount.domains.presentation.websocket_manager import WebSocketManager
from automount.models import MountHealth, StatusSnapshot


@pytest.fixture
def ws_manager():
    return Mock(spec=WebSocketManager)


@pytest.fixture
def handlers(ws_manager):
    return PresentationEventHandlers(websocket_manager=ws_manager)


class TestPresentationEventHandlers:
    @pytest.mark.asyncio
    async def test_status_changed_is_broadcast(self, handlers, ws_manager):
        snapshot = StatusSnapshot(
            mounted_count=1,
            enabled_count=2,
            health=MountHealth.PARTIAL,
            check_interval_minutes=5,
        )

        await handlers.handle_status_changed(StatusChangedEvent(snapshot=snapshot))

        message = ws_manager.broadcast_message.call_args[0][0]
        assert message["type"] == "status"
        assert message["data"]["health"] == "Partial"
        assert message["data"]["summary"] == "1/2 mounted • Check every 5min"
        json.dumps(message)

    @pytest.mark.asyncio
    async def test_location_event_is_broadcast_with_fields(self, handlers, ws_manager):
        event = MountFailedRetryingEvent(
            uri="smb://nas/media",
            display_name="Media",
            attempt=2,
            max_retries=3,
            error_message="Connection refused",
        )

        await handlers.handle_location_event(event)

        message = ws_manager.broadcast_message.call_args[0][0]
        assert message["type"] == "location_event"
        assert message["data"]["event"] == "mount_failed_retrying"
        assert message["data"]["uri"] == "smb://nas/media"
        assert message["data"]["attempt"] == 2
        assert "event_id" not in message["data"]
        json.dumps(message)

    @pytest.mark.asyncio
    async def test_notification_is_broadcast(self, handlers, ws_manager):
        await handlers.handle_notification(
            NotificationRequestedEvent(title="Mount Failed", message="Media: down", is_error=True)
        )

        message = ws_manager.broadcast_message.call_args[0][0]
        assert message["type"] == "notification"
        assert message["data"]["is_error"] is True


class TestWebSocketManager:
    @pytest.mark.asyncio
    async def test_broadcast_drops_failing_clients(self):
        manager = WebSocketManager()
        healthy = AsyncMock()
        broken = AsyncMock()
        broken.send_text.side_effect = RuntimeError("socket closed")

        await manager.connect(healthy)
        await manager.connect(broken)
        assert manager.connection_count == 2

        await manager._broadcast_to_connections({"type": "status", "data": {}})

        healthy.send_text.assert_awaited_once()
        assert manager.connection_count == 1

    @pytest.mark.asyncio
    async def test_sender_task_delivers_queued_messages(self):
        manager = WebSocketManager()
        client = AsyncMock()
        await manager.connect(client)

        manager.start_sender_task()
        manager.broadcast_message({"type": "status", "data": {"mounted_count": 1}})
        await manager._message_queue.join()
        await manager.stop_sender_task()

        sent = json.loads(client.send_text.call_args[0][0])
        assert sent["data"]["mounted_count"] == 1
