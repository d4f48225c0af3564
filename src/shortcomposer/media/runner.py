"""Asynchronous FFmpeg/ffprobe execution with timeout and cancellation."""

import asyncio
import contextlib
import logging
import os
import subprocess
import time
from typing import List, Optional

from ..core.errors import RenderError

# Seconds to wait for a terminated process before killing it
KILL_GRACE_SECONDS = 5.0


async def run_ffmpeg_async(
    args: List[str],
    *,
    logger: logging.Logger,
    timeout: Optional[float] = None,
    error_log_level: Optional[int] = logging.ERROR,
) -> subprocess.CompletedProcess:
    """
    Run an FFmpeg or ffprobe command without blocking the event loop.

    The process is terminated (then killed) when the awaiting task is
    cancelled or the timeout expires.

    Args:
        args: Full argument list, binary first
        logger: Logger for command and failure output
        timeout: Maximum seconds to wait (None for no limit)
        error_log_level: Log level for non-zero exits; None disables logging

    Returns:
        Completed process with decoded stdout/stderr

    Raises:
        RenderError: On non-zero exit, timeout, or missing binary
    """
    base = os.path.basename(str(args[0])) if args else "ffmpeg"
    cmd_str = " ".join(map(str, args))
    logger.debug(f"Running command: {cmd_str}")

    t0 = time.monotonic()
    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.error(f"{base} not found. Please ensure it's installed and in your PATH.")
        raise RenderError(f"{base} not found")

    try:
        if timeout is not None and timeout > 0:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        else:
            stdout, stderr = await process.communicate()
    except asyncio.TimeoutError:
        logger.error(f"{base} timed out after {timeout:.1f}s (PID={process.pid}), terminating")
        await _stop(process)
        raise RenderError(f"{base} timed out after {timeout:.1f}s")
    except asyncio.CancelledError:
        logger.warning(f"Task cancelled while running {base} (PID={process.pid}), terminating")
        await _stop(process)
        raise

    stdout_str = stdout.decode(errors="ignore")
    stderr_str = stderr.decode(errors="ignore")
    rc = process.returncode if process.returncode is not None else 0
    logger.debug(f"{base} finished rc={rc} in {time.monotonic() - t0:.2f}s")

    if rc != 0:
        if error_log_level is not None:
            logger.log(error_log_level, f"{base} failed rc={rc}. Command: {cmd_str}")
            if stderr_str:
                logger.log(error_log_level, f"stderr:\n{stderr_str}")
        raise RenderError(f"{base} failed with return code {rc}", returncode=rc, stderr=stderr_str)

    return subprocess.CompletedProcess(args, rc, stdout_str, stderr_str)


async def _stop(process: asyncio.subprocess.Process) -> None:
    with contextlib.suppress(ProcessLookupError):
        process.terminate()
    try:
        await asyncio.wait_for(process.wait(), timeout=KILL_GRACE_SECONDS)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
