"""
Asynchronous subprocess execution for external tools.
Commands are always argument lists; nothing goes through a shell.
"""
import asyncio
import subprocess
from pathlib import Path
from typing import Optional, Sequence
import logging

logger = logging.getLogger(__name__)


class ToolRunner:
    """Runs one external command and waits for it to exit."""

    async def run(self, cmd: Sequence[str], cwd: Optional[Path] = None) -> str:
        """
        Run cmd and return its stdout.

        Raises:
            subprocess.CalledProcessError: on non-zero exit
            FileNotFoundError: if the executable is not installed
        """
        cmd = [str(part) for part in cmd]
        logger.debug(f"Command: {' '.join(cmd)}")

        process = await asyncio.create_subprocess_exec(
            *cmd,
            cwd=str(cwd) if cwd else None,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE
        )
        stdout, stderr = await process.communicate()

        output = stdout.decode(errors="replace").strip()
        if process.returncode != 0:
            error_output = stderr.decode(errors="replace").strip()
            logger.error(f"{Path(cmd[0]).name} failed with code {process.returncode}: {error_output}")
            raise subprocess.CalledProcessError(
                process.returncode, cmd, output=output, stderr=error_output
            )

        return output


def describe_failure(error: Exception) -> str:
    """Short human-readable reason for a failed command."""
    if isinstance(error, subprocess.CalledProcessError):
        detail = (error.stderr or "").strip().splitlines()
        reason = detail[-1] if detail else f"exit code {error.returncode}"
        return f"{Path(str(error.cmd[0])).name}: {reason}"
    if isinstance(error, FileNotFoundError):
        return f"executable not found: {error.filename or error}"
    return str(error)


TOOL_FAILURES = (subprocess.CalledProcessError, OSError)
