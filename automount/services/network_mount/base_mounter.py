"""Abstract mount provider - the capability the orchestrator delegates to."""

from abc import ABC, abstractmethod
from typing import Optional


class BaseMountProvider(ABC):
    """
    Platform-specific mount operations for remote URIs.

    `mount` and `unmount` return normally on success and raise
    MountFailedError / UnmountFailedError / NotMountedError /
    ProviderUnavailableError otherwise. The query methods never raise for an
    unmounted location.
    """

    @abstractmethod
    async def is_mounted(self, uri: str) -> bool:
        """Whether the OS currently reports an active mount for the URI."""

    @abstractmethod
    async def mount_root_path(self, uri: str) -> Optional[str]:
        """Local filesystem path of the mounted URI, or None when unmounted."""

    @abstractmethod
    async def mount(self, uri: str) -> None:
        """Mount the URI."""

    @abstractmethod
    async def unmount(self, uri: str) -> None:
        """Unmount the URI. Raises NotMountedError when nothing is mounted."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Get platform name for logging."""
