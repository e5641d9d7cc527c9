"""
External command runner.

Runs a tool asynchronously, captures stdout and stderr, and maps a non-zero
exit status to ToolFailureError carrying the command line and the output.
"""

from __future__ import annotations

import asyncio
import shlex
import subprocess
from pathlib import Path
from typing import Sequence

from ..core.exceptions import ToolFailureError, ToolNotFoundError
from ..core.logging import get_logger
from ..core.types import CommandOutput

logger = get_logger(__name__)


def format_command(cmd: Sequence[str | Path]) -> str:
    """Render a command line the way a user would type it."""
    return shlex.join(str(part) for part in cmd)


async def run_command(cmd: Sequence[str | Path], cwd: Path | None = None) -> CommandOutput:
    """Run a command asynchronously and capture its output.

    Args:
        cmd: Program and arguments
        cwd: Optional working directory

    Returns:
        CommandOutput of the finished process

    Raises:
        ToolNotFoundError: If the program cannot be executed
        ToolFailureError: If the program exits with a non-zero status
    """
    args = [str(part) for part in cmd]
    cmd_str = format_command(args)
    logger.debug("Running command", command=cmd_str, cwd=str(cwd) if cwd else None)

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except FileNotFoundError as e:
        raise ToolNotFoundError(
            message=f"Cannot execute {args[0]}",
            tool_name=args[0],
            expected_path="PATH",
            install_hint=f"Install {args[0]} and add it to PATH",
            cause=e,
        )

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []

    async def read_stream(stream: asyncio.StreamReader, lines: list[str], stream_name: str) -> None:
        while True:
            line = await stream.readline()
            if not line:
                break
            decoded = line.decode("utf-8", errors="replace").rstrip()
            lines.append(decoded)
            logger.debug(f"[{stream_name}] {decoded}")

    # Drain both pipes together so neither can fill up and block the child
    await asyncio.gather(
        read_stream(process.stdout, stdout_lines, "stdout"),  # type: ignore
        read_stream(process.stderr, stderr_lines, "stderr"),  # type: ignore
    )

    returncode = await process.wait()
    output = CommandOutput(
        command=cmd_str,
        exit_code=returncode,
        stdout="\n".join(stdout_lines),
        stderr="\n".join(stderr_lines),
    )
    logger.debug("Command completed", command=cmd_str, returncode=returncode)

    if returncode != 0:
        raise ToolFailureError(
            message=f"{Path(args[0]).name} failed",
            command=cmd_str,
            exit_code=returncode,
            output=output.combined,
        )
    return output


def run_passthrough(cmd: Sequence[str | Path]) -> int:
    """Run a command with inherited stdio and return its exit status."""
    args = [str(part) for part in cmd]
    logger.debug("Running command", command=format_command(args))
    try:
        return subprocess.run(args).returncode
    except FileNotFoundError as e:
        raise ToolNotFoundError(
            message=f"Cannot execute {args[0]}",
            tool_name=args[0],
            expected_path="PATH",
            cause=e,
        )
