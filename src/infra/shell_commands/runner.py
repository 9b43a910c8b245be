"""Command runner for executing external programs.

Commands are always executed from an argument vector. Nothing is ever passed
through a shell, so each argument reaches the program as one literal token
regardless of the characters it contains.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from loguru import logger

from .types import (
    EXIT_CODE_NOT_EXECUTABLE,
    EXIT_CODE_NOT_FOUND,
    EXIT_CODE_SPAWN_FAILED,
    EXIT_CODE_TIMEOUT,
    ProcessResult,
)


class CommandRunner:
    """Low-level command executor with consistent result handling.

    Spawn failures and timeouts are returned as a :class:`ProcessResult`
    with a synthetic exit code instead of being raised, so callers decide
    uniformly whether a failure is fatal. The runner never retries.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialize the command runner.

        Args:
            cwd: Working directory for executed commands (defaults to the
                 current process working directory)
        """
        self.cwd = cwd

    def run(
        self,
        command: str,
        args: Sequence[str],
        *,
        timeout: float | None = None,
    ) -> ProcessResult:
        """Execute a program with an argument vector and capture its output.

        Args:
            command: Program name or path (e.g. "helm")
            args: Arguments, each passed as exactly one argv entry
            timeout: Seconds before the process is killed (None = no limit)

        Returns:
            ProcessResult with captured output and exit status

        Raises:
            TypeError: If ``args`` is a single string instead of a sequence
        """
        if isinstance(args, str):
            raise TypeError("args must be a sequence of arguments, not a string")

        argv = [command, *args]
        logger.debug(f"Running {command} with {len(argv) - 1} argument(s)")

        try:
            result = subprocess.run(
                argv,
                cwd=self.cwd,
                capture_output=True,
                text=True,
                timeout=timeout,
                shell=False,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.warning(f"{command} timed out after {timeout}s")
            return ProcessResult(
                stdout=_as_text(e.stdout),
                stderr=_as_text(e.stderr) or f"Command timed out after {timeout}s",
                exit_code=EXIT_CODE_TIMEOUT,
                timed_out=True,
            )
        except FileNotFoundError as e:
            logger.error(f"Executable not found: {command}")
            return ProcessResult(stderr=str(e), exit_code=EXIT_CODE_NOT_FOUND)
        except PermissionError as e:
            logger.error(f"Permission denied executing {command}")
            return ProcessResult(stderr=str(e), exit_code=EXIT_CODE_NOT_EXECUTABLE)
        except OSError as e:
            logger.error(f"Failed to start {command}: {e}")
            return ProcessResult(stderr=str(e), exit_code=EXIT_CODE_SPAWN_FAILED)
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid arguments for {command}: {e}")
            return ProcessResult(stderr=str(e), exit_code=EXIT_CODE_SPAWN_FAILED)

        return ProcessResult(
            stdout=result.stdout or "",
            stderr=result.stderr or "",
            exit_code=result.returncode,
        )


def _as_text(output: str | bytes | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
