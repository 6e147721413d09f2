from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from automount.dependencies import get_mount_orchestrator, get_websocket_manager
from automount.domains.presentation.websocket_manager import WebSocketManager
from automount.services.orchestrator import MountOrchestrator, format_status_line

router = APIRouter(prefix="/api/ws", tags=["websockets"])


@router.websocket("/live")
async def websocket_endpoint(
    websocket: WebSocket,
    ws_manager: WebSocketManager = Depends(get_websocket_manager),
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
):
    await ws_manager.connect(websocket)

    try:
        snapshot = await orchestrator.get_status()
        await ws_manager.send_to(
            websocket,
            {
                "type": "status",
                "data": {
                    **snapshot.model_dump(mode="json"),
                    "summary": format_status_line(snapshot),
                },
            },
        )

        while True:
            message = await websocket.receive_text()
            if message == "ping":
                await websocket.send_text("pong")

    except WebSocketDisconnect:
        ws_manager.disconnect(websocket)
