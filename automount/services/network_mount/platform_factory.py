"""Platform detection and mount provider creation."""

import logging
import platform

from .base_mounter import BaseMountProvider
from ...config import Settings


class UnsupportedPlatformError(Exception):
    """Raised when platform is not supported for network mounting."""
    pass


class PlatformFactory:
    """Creates the mount provider for the running platform."""

    def detect_platform(self) -> str:
        """Detect current platform. Returns: linux, macos or windows."""
        system = platform.system().lower()

        if system == "linux":
            return "linux"
        elif system == "darwin":
            return "macos"
        elif system == "windows":
            return "windows"
        else:
            raise UnsupportedPlatformError(f"Platform {system} not supported for network mounting")

    def create_provider(self, settings: Settings) -> BaseMountProvider:
        """Create platform-specific mount provider instance."""
        platform_name = self.detect_platform()

        if platform_name == "linux":
            from .gio_mounter import GioMountProvider
            provider = GioMountProvider(
                mount_timeout_seconds=settings.mount_timeout_seconds,
                query_timeout_seconds=settings.provider_query_timeout_seconds,
            )
            logging.info(f"Initialized {provider.get_platform_name()} mount provider")
            return provider

        raise UnsupportedPlatformError(f"No mount provider implementation for platform: {platform_name}")
