"""GIO/GVfs mount provider for Linux desktops."""

import asyncio
import logging
from typing import Optional, Tuple

from .base_mounter import BaseMountProvider
from ...core.exceptions import (
    MountFailedError,
    NotMountedError,
    ProviderUnavailableError,
    UnmountFailedError,
)

LOCAL_PATH_PREFIX = "local path:"


class GioMountProvider(BaseMountProvider):
    """Mounts bookmark URIs through the `gio` command line tool (GVfs)."""

    def __init__(
        self,
        gio_binary: str = "gio",
        mount_timeout_seconds: float = 30.0,
        query_timeout_seconds: float = 10.0,
    ):
        self._gio = gio_binary
        self._mount_timeout = mount_timeout_seconds
        self._query_timeout = query_timeout_seconds

    async def is_mounted(self, uri: str) -> bool:
        return await self.mount_root_path(uri) is not None

    async def mount_root_path(self, uri: str) -> Optional[str]:
        """Ask `gio info` for the FUSE path GVfs exposes for the URI."""
        try:
            returncode, stdout, _ = await self._run(
                ["info", "-a", "standard::name", uri], self._query_timeout
            )
        except ProviderUnavailableError as e:
            logging.warning(f"Mount query failed for {uri}: {e.message}")
            return None

        if returncode != 0:
            return None

        for line in stdout.splitlines():
            line = line.strip()
            if line.lower().startswith(LOCAL_PATH_PREFIX):
                local_path = line[len(LOCAL_PATH_PREFIX):].strip()
                return local_path or None

        # gio answered but exposes no FUSE path; GVfs mounts always have one
        logging.debug(f"No local path reported for {uri}")
        return None

    async def mount(self, uri: str) -> None:
        logging.info(f"Attempting GIO mount: {uri}")
        returncode, _, stderr = await self._run(["mount", uri], self._mount_timeout)

        if returncode != 0:
            error_msg = stderr.strip() or f"gio mount exited with {returncode}"
            logging.error(f"Mount failed for {uri}: {error_msg}")
            raise MountFailedError(uri, error_msg)

        logging.info(f"Successfully mounted {uri}")

    async def unmount(self, uri: str) -> None:
        if not await self.is_mounted(uri):
            raise NotMountedError(uri)

        logging.info(f"Attempting GIO unmount: {uri}")
        returncode, _, stderr = await self._run(["mount", "-u", uri], self._mount_timeout)

        if returncode != 0:
            error_msg = stderr.strip() or f"gio mount -u exited with {returncode}"
            if "not mounted" in error_msg.lower():
                raise NotMountedError(uri, error_msg)
            logging.error(f"Unmount failed for {uri}: {error_msg}")
            raise UnmountFailedError(uri, error_msg)

        logging.info(f"Successfully unmounted {uri}")

    def get_platform_name(self) -> str:
        """Get platform name for logging."""
        return "Linux (GIO)"

    async def _run(self, args: list, timeout: float) -> Tuple[int, str, str]:
        """Run a gio subcommand. Raises ProviderUnavailableError if gio cannot run."""
        uri = args[-1]
        try:
            process = await asyncio.create_subprocess_exec(
                self._gio,
                *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProviderUnavailableError(uri, f"Cannot run {self._gio}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            logging.error(f"gio {args[0]} timed out after {timeout}s for {uri}")
            process.kill()
            await process.wait()
            raise MountFailedError(uri, f"gio {args[0]} timed out after {timeout:.0f}s")

        return (
            process.returncode,
            stdout.decode(errors="replace") if stdout else "",
            stderr.decode(errors="replace") if stderr else "",
        )
