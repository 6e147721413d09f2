import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request

from .api import locations, status, uiactions, websockets
from .config import Settings
from .dependencies import (
    get_config_watcher,
    get_event_bus,
    get_mount_orchestrator,
    get_notification_handler,
    get_periodic_trigger,
    get_websocket_manager,
)
from .domains.presentation.registration import register_presentation_domain
from .logging_config import setup_logging

settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    # Startup
    setup_logging(settings)

    config_info = settings.config_file_info
    logging.info(f"Configuration loaded from: {config_info['active_config_file']}")
    logging.info(f"Running on hostname: {config_info['hostname']}")
    if len(config_info["all_available_configs"]) > 1:
        logging.info(
            f"Available config files: {', '.join(config_info['all_available_configs'])}"
        )

    logging.info("Network Auto Mount Agent starting up...")
    logging.info(f"Bookmarks: {settings.bookmarks_path}")
    logging.info(f"Aliases: {settings.alias_base_path}")

    event_bus = get_event_bus()
    await register_presentation_domain(event_bus)
    await get_notification_handler().register()

    websocket_manager = get_websocket_manager()
    websocket_manager.start_sender_task()

    orchestrator = get_mount_orchestrator()
    orchestrator.start()

    periodic_trigger = get_periodic_trigger()
    await periodic_trigger.start()

    config_watcher = get_config_watcher()
    await config_watcher.start()

    yield

    # Shutdown
    logging.info("Network Auto Mount Agent shutting down...")

    await config_watcher.stop()
    await periodic_trigger.stop()
    await orchestrator.shutdown()
    await websocket_manager.stop_sender_task()

    logging.info("All background tasks stopped")


app = FastAPI(
    title="Network Auto Mount Agent",
    description="Keeps bookmarked network locations mounted and aliased",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logging.debug(
        f"Incoming request: {request.method} {request.url.path}",
        extra={
            "operation": "http_request",
            "method": request.method,
            "path": request.url.path,
            "client_ip": request.client.host if request.client else "unknown",
        },
    )

    response = await call_next(request)

    logging.debug(
        f"Response: {response.status_code}",
        extra={
            "operation": "http_response",
            "status_code": response.status_code,
            "path": request.url.path,
        },
    )

    return response


app.include_router(status.router)
app.include_router(locations.router)
app.include_router(uiactions.router)
app.include_router(websockets.router)


@app.get("/")
async def root():
    return {"status": "ok", "message": "Network Auto Mount Agent is running"}


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "network-automount"}


if __name__ == "__main__":
    uvicorn.run(
        "automount.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_level="info",
    )
