import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

import aiofiles.os

ChangeCallback = Callable[[List[Path]], Awaitable[object]]


async def _read_mtime(path: Path) -> Optional[float]:
    try:
        stat_result = await aiofiles.os.stat(path)
    except FileNotFoundError:
        return None
    except OSError as e:
        logging.warning(f"Could not stat watched file {path}: {e}")
        return None
    return stat_result.st_mtime


class ConfigWatcher:
    """
    Polls modification times of the bookmark list and the settings blob.

    The first poll only records a baseline. After that, any mtime change
    (including a file appearing or disappearing) invokes `on_change` with
    the changed paths.
    """

    def __init__(
        self,
        paths: Iterable[Path],
        on_change: ChangeCallback,
        poll_interval_seconds: float,
    ):
        self._paths = list(paths)
        self._on_change = on_change
        self._poll_interval_seconds = poll_interval_seconds
        self._mtimes: Dict[Path, Optional[float]] = {}
        self._has_baseline = False
        self._is_running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def paths(self) -> List[Path]:
        return list(self._paths)

    def is_running(self) -> bool:
        return self._is_running

    def set_paths(self, paths: Iterable[Path]) -> None:
        """Watch a different set of files; the next poll re-records the baseline."""
        self._paths = list(paths)
        self._mtimes.clear()
        self._has_baseline = False

    async def start(self) -> None:
        if self._is_running:
            logging.warning("Config watcher already running")
            return

        self._is_running = True
        self._task = asyncio.create_task(self._watch_loop())
        logging.info(
            f"Watching {', '.join(str(p) for p in self._paths)} "
            f"every {self._poll_interval_seconds}s"
        )

    async def stop(self) -> None:
        if not self._is_running:
            return

        self._is_running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logging.info("Config watcher stopped")

    async def check_once(self) -> List[Path]:
        """Poll every watched file once. Returns the paths that changed."""
        changed: List[Path] = []
        for path in self._paths:
            mtime = await _read_mtime(path)
            if self._has_baseline and self._mtimes.get(path) != mtime:
                changed.append(path)
            self._mtimes[path] = mtime

        if not self._has_baseline:
            self._has_baseline = True
            return []

        if changed:
            logging.info(f"Configuration changed: {', '.join(str(p) for p in changed)}")
            await self._on_change(changed)
        return changed

    async def _watch_loop(self) -> None:
        try:
            while self._is_running:
                try:
                    await self.check_once()
                except Exception as e:
                    logging.error(f"Error in config watcher loop: {e}", exc_info=True)

                await asyncio.sleep(self._poll_interval_seconds)

        except asyncio.CancelledError:
            logging.debug("Config watcher loop cancelled")
            raise
