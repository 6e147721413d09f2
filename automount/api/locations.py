import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from ..core.exceptions import LocationNotFoundError
from ..dependencies import get_mount_orchestrator
from ..models import LocationView, StatusSnapshot
from ..services.orchestrator import MountOrchestrator
from ..utils import is_valid_alias_override

router = APIRouter(prefix="/api/locations", tags=["locations"])


class LocationRequest(BaseModel):
    uri: str = Field(..., description="Bookmark URI of the location")


class LocationSettingsUpdate(BaseModel):
    uri: str = Field(..., description="Bookmark URI of the location")
    enabled: Optional[bool] = None
    alias_name: Optional[str] = Field(
        default=None, description="New alias name; empty string restores the default"
    )
    create_alias: Optional[bool] = None


def _not_found(error: LocationNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.get("", response_model=List[LocationView])
async def list_locations(
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
) -> List[LocationView]:
    return await orchestrator.get_locations()


@router.post("/mount")
async def mount_location(
    request: LocationRequest,
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
):
    try:
        success = await orchestrator.mount_location(request.uri)
    except LocationNotFoundError as e:
        raise _not_found(e)
    return {"success": success, "uri": request.uri}


@router.post("/unmount")
async def unmount_location(
    request: LocationRequest,
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
):
    try:
        success = await orchestrator.unmount_location(request.uri)
    except LocationNotFoundError as e:
        raise _not_found(e)
    return {"success": success, "uri": request.uri}


@router.post("/toggle")
async def toggle_location(
    request: LocationRequest,
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
):
    try:
        success = await orchestrator.toggle_location(request.uri)
    except LocationNotFoundError as e:
        raise _not_found(e)
    return {"success": success, "uri": request.uri}


@router.put("/settings", response_model=StatusSnapshot)
async def update_location_settings(
    update: LocationSettingsUpdate,
    orchestrator: MountOrchestrator = Depends(get_mount_orchestrator),
) -> StatusSnapshot:
    """Persist settings for one location and reconcile immediately."""
    alias_name = update.alias_name.strip() if update.alias_name is not None else None
    if alias_name and not is_valid_alias_override(alias_name):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Alias name must be a single file name without path separators",
        )

    logging.info(f"Location settings update requested for {update.uri}")
    try:
        return await orchestrator.update_location_settings(
            update.uri,
            enabled=update.enabled,
            alias_name=alias_name,
            create_alias=update.create_alias,
        )
    except LocationNotFoundError as e:
        raise _not_found(e)
