from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from .utils.host_config import get_hostname_settings_file


class Settings(BaseSettings):
    # Bookmark kilder
    bookmarks_file: str = "~/.config/gtk-3.0/bookmarks"
    bookmark_settings_file: str = "~/.config/network-automount/bookmark-settings.json"

    # Periodic check
    check_interval_minutes: int = Field(default=5, ge=1, le=60)
    config_poll_interval_seconds: int = Field(default=10, ge=1)

    # Retry policy (fixed delay, no growth)
    max_retries: int = Field(default=3, ge=0, le=10)
    retry_delay_seconds: int = Field(default=30, ge=1)

    # Startup timing
    startup_delay_seconds: int = 5  # First reconcile after startup
    startup_settle_seconds: int = 10  # Startup notifications suppressed until then

    # Mount provider timeouts
    mount_timeout_seconds: float = 30.0
    provider_query_timeout_seconds: float = 10.0

    # Aliases (symlinks)
    alias_base_directory: str = "~/NetworkMounts"

    # Notifications
    notifications_enabled: bool = True
    notify_success: bool = True
    notify_error: bool = True

    # Logging konfiguration
    log_level: str = "INFO"
    log_file_path: str = "logs/automount.log"
    log_retention_days: int = 30

    # API
    api_host: str = "127.0.0.1"
    api_port: int = 8765

    model_config = SettingsConfigDict(env_file=get_hostname_settings_file())

    @property
    def log_directory(self) -> Path:
        """Returnerer log directory som Path objekt"""
        return Path(self.log_file_path).parent

    @property
    def bookmarks_path(self) -> Path:
        return Path(self.bookmarks_file).expanduser()

    @property
    def bookmark_settings_path(self) -> Path:
        return Path(self.bookmark_settings_file).expanduser()

    @property
    def alias_base_path(self) -> Path:
        return Path(self.alias_base_directory).expanduser()

    @property
    def config_file_info(self) -> dict:
        """Return information about which configuration file is being used."""
        from .utils.host_config import get_hostname, list_all_settings_files

        return {
            "hostname": get_hostname(),
            "active_config_file": get_hostname_settings_file(),
            "all_available_configs": list_all_settings_files()
        }
