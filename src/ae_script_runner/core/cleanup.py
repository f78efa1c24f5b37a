"""
Removal of temporary script files after a run.
"""

import asyncio
import logging
import os
from typing import Final, Optional, Set

from .error_handling import handle_errors

logger = logging.getLogger(__name__)

DEFAULT_CLEANUP_DELAY: Final[float] = 1.0


@handle_errors(OSError, default_return=False)
def cleanup_temp_file(file_path: str) -> bool:
    """Delete a temporary file if it still exists.

    Never raises; failures are logged. Returns True when a file was removed.
    """
    if not os.path.exists(file_path):
        return False
    os.remove(file_path)
    logger.info(f"Cleaned up temporary file: {file_path}")
    return True


class CleanupScheduler:
    """Runs cleanups after a delay so After Effects can finish reading the file."""

    def __init__(self, delay: float = DEFAULT_CLEANUP_DELAY):
        self.delay = delay
        self._pending: Set[asyncio.Task] = set()

    def schedule(self, file_path: str, delay: Optional[float] = None) -> asyncio.Task:
        """Schedule removal of ``file_path`` on the running event loop"""
        wait = self.delay if delay is None else delay
        task = asyncio.get_running_loop().create_task(self._cleanup_later(file_path, wait))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        logger.debug(f"Scheduled cleanup of {file_path} in {wait:g}s")
        return task

    async def _cleanup_later(self, file_path: str, delay: float) -> bool:
        await asyncio.sleep(delay)
        return cleanup_temp_file(file_path)

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled cleanup to finish"""
        if self._pending:
            await asyncio.gather(*list(self._pending))
