from fastapi import APIRouter, Depends

from ..dependencies import get_mount_orchestrator
from ..models import MountTrigger, StatusSnapshot
from ..services.orchestrator import MountOrchestrator, format_status_line

router = APIRouter(prefix="/api", tags=["status"])


@router.get("/status", response_model=StatusSnapshot)
async def get_status(
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
) -> StatusSnapshot:
    """Latest aggregated mount status."""
    return await orchestrator.get_status()


@router.post("/check")
async def check_mounts(orchestrator: MountOrchestrator = Depends(get_mount_orchestrator)):
    """
    Run a manual reconciliation pass.

    Bypasses an exhausted retry budget: every enabled, unmounted location is
    attempted again.
    """
    snapshot = await orchestrator.reconcile(MountTrigger.MANUAL)
    return {
        "success": True,
        "status": snapshot,
        "summary": format_status_line(snapshot),
    }


@router.post("/mount-all")
async def mount_all(orchestrator: MountOrchestrator = Depends(get_mount_orchestrator)):
    count = await orchestrator.mount_all_enabled()
    return {"success": True, "action": "mount_all", "count": count}


@router.post("/unmount-all")
async def unmount_all(orchestrator: MountOrchestrator = Depends(get_mount_orchestrator)):
    count = await orchestrator.unmount_all()
    return {"success": True, "action": "unmount_all", "count": count}
