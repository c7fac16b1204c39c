"""Subprocess helper shared by the runtime check and the server installer."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    returncode: int
    stdout: str
    stderr: str


async def shell_exec(
    command: str,
    args: list[str],
    cwd: Optional[str] = None,
) -> CommandResult:
    """Run a command to completion and collect its output.

    Resolves once both output streams are closed and the process has exited.

    Raises:
        OSError: If the command cannot be spawned (missing binary, bad cwd)
    """
    logger.debug(f"exec: {command} {' '.join(args)} (cwd={cwd or '.'})")
    process = await asyncio.create_subprocess_exec(
        command,
        *args,
        cwd=cwd or None,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout, stderr = await process.communicate()
    result = CommandResult(
        returncode=process.returncode if process.returncode is not None else -1,
        stdout=stdout.decode(errors="replace"),
        stderr=stderr.decode(errors="replace"),
    )
    if result.stderr.strip():
        logger.debug(f"exec stderr: {command}: {result.stderr.strip()[:200]}")
    return result
