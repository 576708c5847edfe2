"""
Subprocess Runner with Timeout Enforcement

Runs external CLI commands (the Remotion toolchain) with:
- asyncio subprocesses so other requests keep running
- Strict timeout enforcement
- Process group management for clean termination
- Detailed, truncated error reporting

This is the primary protection against runaway bundler/renderer processes.
"""

import asyncio
import logging
import os
import signal
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

# Keep the tail of stderr/stdout in error messages
MAX_ERROR_OUTPUT = 2000


class ProcessTimeout(Exception):
    """Raised when a command exceeds the allowed timeout."""

    pass


class ProcessFailed(Exception):
    """Raised when a command fails with a non-zero exit code or cannot start."""

    def __init__(self, message: str, returncode: Optional[int] = None, output: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.output = output


@dataclass
class ProcessResult:
    """Captured output of a finished command."""

    returncode: int
    stdout: str
    stderr: str
    elapsed_seconds: float


def truncate_output(text: str, limit: int = MAX_ERROR_OUTPUT) -> str:
    """Keep only the last `limit` characters of command output."""
    text = text.strip()
    return text[-limit:] if len(text) > limit else text


async def run_process(
    cmd: List[str],
    cwd: Optional[Path] = None,
    timeout_seconds: float = 600,
) -> ProcessResult:
    """
    Run a command, wait for it, and return its captured output.

    This function:
    1. Starts the command in its own process group (start_new_session)
    2. Awaits completion without blocking the event loop
    3. Enforces the timeout with SIGKILL to the process group
    4. Kills the group as well if the awaiting task is cancelled

    Args:
        cmd: Command as list of arguments
        cwd: Working directory for the command
        timeout_seconds: Maximum allowed runtime in seconds

    Returns:
        ProcessResult with decoded stdout/stderr

    Raises:
        ProcessTimeout: If the command exceeds the timeout
        ProcessFailed: If the command cannot start or exits non-zero

    Example:
        result = await run_process(
            ["npx", "remotion", "compositions", "bundle/"],
            cwd=Path("/srv/remotion"),
            timeout_seconds=120,
        )
    """
    logger.info(f"Running {cmd[0]} with timeout={timeout_seconds}s")
    logger.debug(f"Command: {' '.join(cmd)}")

    start_time = time.time()
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=True,
        )
    except OSError as e:
        raise ProcessFailed(f"Could not start {cmd[0]}: {e}")

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout_seconds)
    except asyncio.TimeoutError:
        elapsed = time.time() - start_time
        logger.warning(f"{cmd[0]} timeout after {elapsed:.1f}s (limit: {timeout_seconds}s)")
        await _kill_process_group(process)
        raise ProcessTimeout(f"{cmd[0]} exceeded timeout of {timeout_seconds} seconds")
    except asyncio.CancelledError:
        logger.warning(f"{cmd[0]} cancelled, killing process group")
        await _kill_process_group(process)
        raise

    elapsed = time.time() - start_time
    result = ProcessResult(
        returncode=process.returncode,
        stdout=stdout.decode("utf-8", errors="replace"),
        stderr=stderr.decode("utf-8", errors="replace"),
        elapsed_seconds=elapsed,
    )

    if result.returncode != 0:
        output = truncate_output(result.stderr or result.stdout)
        error_msg = f"{cmd[0]} failed with code {result.returncode}"
        if output:
            error_msg += f": {output}"
        logger.error(error_msg)
        raise ProcessFailed(error_msg, returncode=result.returncode, output=output)

    logger.info(f"{cmd[0]} completed successfully in {elapsed:.1f}s")
    return result


async def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """
    Kill a process and its entire process group, then reap it.

    Uses SIGKILL to ensure immediate termination.
    Catches and logs any errors during termination.
    """
    try:
        pgid = os.getpgid(process.pid)
        logger.info(f"Killing process group {pgid}")
        os.killpg(pgid, signal.SIGKILL)
    except ProcessLookupError:
        logger.debug("Process already terminated")
    except OSError as e:
        logger.warning(f"Error killing process group: {e}")
        try:
            process.kill()
        except ProcessLookupError:
            pass

    try:
        await asyncio.wait_for(process.wait(), timeout=5)
    except asyncio.TimeoutError:
        logger.warning(f"Process {process.pid} did not exit after SIGKILL")
