"""
Network Mount Module

The mount provider capability consumed by the orchestrator:

- BaseMountProvider: abstract interface (query, mount, unmount)
- GioMountProvider: Linux implementation on top of GIO/GVfs
- PlatformFactory: platform detection and provider creation
"""

from .base_mounter import BaseMountProvider
from .gio_mounter import GioMountProvider
from .platform_factory import PlatformFactory, UnsupportedPlatformError

__all__ = [
    "BaseMountProvider",
    "GioMountProvider",
    "PlatformFactory",
    "UnsupportedPlatformError",
]
