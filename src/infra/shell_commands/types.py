"""Data types for shell command results."""

from __future__ import annotations

from dataclasses import dataclass

# Synthetic exit codes for failures that never produced a real process status
EXIT_CODE_TIMEOUT = 124
EXIT_CODE_NOT_EXECUTABLE = 126
EXIT_CODE_NOT_FOUND = 127
EXIT_CODE_SPAWN_FAILED = 1


@dataclass
class ProcessResult:
    """Result of one external command invocation.

    Attributes:
        stdout: Captured standard output (opaque, not interpreted)
        stderr: Captured standard error, or the spawn error text
        exit_code: Process exit code, or a synthetic code for spawn
            failures and timeouts
        timed_out: Whether the command was killed after its timeout
    """

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    timed_out: bool = False

    @property
    def success(self) -> bool:
        """Check if the command ran to completion with exit code 0."""
        return self.exit_code == 0 and not self.timed_out
