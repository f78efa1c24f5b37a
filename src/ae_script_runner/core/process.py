"""
External process execution.

Commands are always started without a shell; arguments are passed as a list.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Final, Sequence

from .error_handling import ExecutionTimeoutError, NonZeroExitError, ProcessLaunchError
from .models import ProcessOutput

logger = logging.getLogger(__name__)

PROBE_TIMEOUT: Final[float] = 5.0


async def _spawn(command: str, args: Sequence[str]) -> asyncio.subprocess.Process:
    try:
        return await asyncio.create_subprocess_exec(
            command,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ProcessLaunchError(
            f"Failed to start {command}: {e}", details={"command": command}
        ) from e


async def _kill(process: asyncio.subprocess.Process) -> None:
    try:
        process.kill()
    except ProcessLookupError:
        pass
    await process.wait()


async def execute_command(
    command: str, args: Sequence[str], timeout: float | None = None
) -> None:
    """Run a command to completion.

    stdout is logged line by line as it arrives, stderr is collected and
    becomes the failure message.

    Args:
        command: Executable to run
        args: Arguments passed to the executable
        timeout: Seconds to wait before killing the process, None waits forever

    Raises:
        ProcessLaunchError: The executable could not be started
        NonZeroExitError: The process exited with a non-zero code
        ExecutionTimeoutError: The process exceeded ``timeout``
    """
    logger.debug("Executing %s %s", command, list(args))
    process = await _spawn(command, args)
    stderr_chunks: list[str] = []

    async def pump_stdout() -> None:
        async for line in process.stdout:
            text = line.decode("utf-8", errors="replace").rstrip()
            if text:
                logger.info("%s", text)

    async def pump_stderr() -> None:
        while chunk := await process.stderr.read(4096):
            stderr_chunks.append(chunk.decode("utf-8", errors="replace"))

    async def finish() -> int:
        await asyncio.gather(pump_stdout(), pump_stderr())
        return await process.wait()

    try:
        returncode = await asyncio.wait_for(finish(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(process)
        logger.warning("Command timed out: %s", command)
        raise ExecutionTimeoutError(command, timeout)

    if returncode != 0:
        raise NonZeroExitError(returncode, "".join(stderr_chunks).strip())


async def capture_command(
    command: str, args: Sequence[str], timeout: float = PROBE_TIMEOUT
) -> ProcessOutput:
    """Run a short command and capture its output.

    Raises:
        ProcessLaunchError: The executable could not be started
        ExecutionTimeoutError: The process exceeded ``timeout``
    """
    process = await _spawn(command, args)
    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _kill(process)
        raise ExecutionTimeoutError(command, timeout)

    return ProcessOutput(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace").strip(),
        stderr=stderr.decode("utf-8", errors="replace").strip(),
    )
