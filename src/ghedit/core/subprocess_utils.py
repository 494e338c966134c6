"""Async subprocess execution for gh CLI commands."""

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path

logger = logging.getLogger(__name__)


async def execute_gh_command(cmd: Sequence[str], cwd: Path | None = None) -> str:
    """Execute a gh CLI command and return stdout.

    Args:
        cmd: Command and arguments to execute
        cwd: Working directory for command execution (None = inherit)

    Returns:
        stdout from the command, decoded as UTF-8 (undecodable bytes replaced)

    Raises:
        RuntimeError: If the command exits non-zero or gh is not installed,
            with the command line and stderr in the message
    """
    cmd_str = " ".join(cmd)
    logger.debug("Running %s", cmd_str)
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=cwd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError as e:
        raise RuntimeError(f"Command not found: {cmd_str}") from e

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        error_msg = f"Failed to execute gh command '{cmd_str}'"
        stderr_text = stderr.decode("utf-8", errors="replace").strip()
        if stderr_text:
            error_msg += f": {stderr_text}"
        raise RuntimeError(error_msg)

    return stdout.decode("utf-8", errors="replace")
