import logging

from fastapi import APIRouter, Depends

from ..config import Settings
from ..dependencies import (
    get_mount_orchestrator,
    get_notification_handler,
    get_periodic_trigger,
    get_settings,
)

router = APIRouter(prefix="/api", tags=["uiactions"])


@router.get("/settings", response_model=Settings)
async def read_settings(settings: Settings = Depends(get_settings)):
    """Get current agent settings"""
    logging.info("Settings endpoint called", extra={"operation": "api_settings"})
    return settings


@router.get("/config-info")
async def get_config_info(settings: Settings = Depends(get_settings)):
    """Which configuration file is in use on this host"""
    return settings.config_file_info


@router.post("/reload-config")
async def reload_config():
    """Re-read settings and apply them to the running services"""
    logging.info("Config reload requested", extra={"operation": "api_reload_config"})

    get_settings.cache_clear()
    try:
        new_settings = get_settings()
    except ValueError as e:
        logging.error(f"Failed to reload configuration: {e}")
        return {"success": False, "message": f"Failed to reload configuration: {e}"}

    get_mount_orchestrator().apply_settings(new_settings)
    get_notification_handler().apply_settings(new_settings)
    await get_periodic_trigger().reconfigure(new_settings.check_interval_minutes)

    config_info = new_settings.config_file_info
    logging.info(f"Configuration reloaded from: {config_info['active_config_file']}")

    return {
        "success": True,
        "message": "Configuration reloaded successfully",
        "config_file": config_info["active_config_file"],
        "hostname": config_info["hostname"],
    }
