from functools import lru_cache
from typing import Any, Dict

from automount.core.events.event_bus import DomainEventBus
from automount.domains.presentation.event_handlers import PresentationEventHandlers
from automount.domains.presentation.websocket_manager import WebSocketManager

from .config import Settings
from .models import MountTrigger
from .services.bookmarks import BookmarkStore, GtkBookmarkSource, LocationSettingsRepository
from .services.config_watcher import ConfigWatcher
from .services.network_mount import BaseMountProvider, PlatformFactory
from .services.orchestrator import MountOrchestrator, NotificationHandler
from .services.periodic_trigger import PeriodicTrigger
from .services.retry_scheduler import RetryScheduler
from .services.symlink_manager import SymlinkManager

# Global singleton instances
_singletons: Dict[str, Any] = {}


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_event_bus() -> DomainEventBus:
    if "event_bus" not in _singletons:
        _singletons["event_bus"] = DomainEventBus()
    return _singletons["event_bus"]


def get_mount_provider() -> BaseMountProvider:
    if "mount_provider" not in _singletons:
        _singletons["mount_provider"] = PlatformFactory().create_provider(get_settings())
    return _singletons["mount_provider"]


def get_bookmark_store() -> BookmarkStore:
    if "bookmark_store" not in _singletons:
        settings = get_settings()
        _singletons["bookmark_store"] = BookmarkStore(
            bookmark_source=GtkBookmarkSource(settings.bookmarks_path),
            settings_repository=LocationSettingsRepository(settings.bookmark_settings_path),
        )
    return _singletons["bookmark_store"]


def get_symlink_manager() -> SymlinkManager:
    if "symlink_manager" not in _singletons:
        _singletons["symlink_manager"] = SymlinkManager(get_settings().alias_base_path)
    return _singletons["symlink_manager"]


def get_retry_scheduler() -> RetryScheduler:
    if "retry_scheduler" not in _singletons:
        _singletons["retry_scheduler"] = RetryScheduler()
    return _singletons["retry_scheduler"]


def get_mount_orchestrator() -> MountOrchestrator:
    if "mount_orchestrator" not in _singletons:
        _singletons["mount_orchestrator"] = MountOrchestrator(
            settings=get_settings(),
            bookmark_store=get_bookmark_store(),
            mount_provider=get_mount_provider(),
            symlink_manager=get_symlink_manager(),
            retry_scheduler=get_retry_scheduler(),
            event_bus=get_event_bus(),
        )
    return _singletons["mount_orchestrator"]


def get_notification_handler() -> NotificationHandler:
    if "notification_handler" not in _singletons:
        _singletons["notification_handler"] = NotificationHandler(
            settings=get_settings(), event_bus=get_event_bus()
        )
    return _singletons["notification_handler"]


def get_periodic_trigger() -> PeriodicTrigger:
    if "periodic_trigger" not in _singletons:
        orchestrator = get_mount_orchestrator()

        async def on_tick():
            await orchestrator.reconcile(MountTrigger.PERIODIC)

        _singletons["periodic_trigger"] = PeriodicTrigger(
            on_tick=on_tick, interval_minutes=get_settings().check_interval_minutes
        )
    return _singletons["periodic_trigger"]


def get_config_watcher() -> ConfigWatcher:
    if "config_watcher" not in _singletons:
        settings = get_settings()
        orchestrator = get_mount_orchestrator()

        async def on_change(changed_paths):
            await orchestrator.reconcile(MountTrigger.SETTINGS_CHANGED)

        _singletons["config_watcher"] = ConfigWatcher(
            paths=[settings.bookmarks_path, settings.bookmark_settings_path],
            on_change=on_change,
            poll_interval_seconds=settings.config_poll_interval_seconds,
        )
    return _singletons["config_watcher"]


def get_websocket_manager() -> WebSocketManager:
    if "websocket_manager" not in _singletons:
        _singletons["websocket_manager"] = WebSocketManager()
    return _singletons["websocket_manager"]


def get_presentation_event_handlers() -> PresentationEventHandlers:
    if "presentation_event_handlers" not in _singletons:
        _singletons["presentation_event_handlers"] = PresentationEventHandlers(
            websocket_manager=get_websocket_manager()
        )
    return _singletons["presentation_event_handlers"]


def reset_singletons() -> None:
    _singletons.clear()
    get_settings.cache_clear()
