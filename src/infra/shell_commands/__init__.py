"""Shell command abstractions for Helm deployment operations.

This package wraps external programs behind argument-vector execution:

- runner: Generic executor returning ProcessResult (no shell, no retries)
- helm: Helm repository and release commands

Usage:
    from src.infra.shell_commands import ShellCommands

    commands = ShellCommands(helm_binary="helm", timeout=600)
    result = commands.helm.repo_update()
"""

from pathlib import Path

from .helm import HelmCommands
from .runner import CommandRunner
from .types import ProcessResult


class ShellCommands:
    """Unified interface for shell command operations.

    Attributes:
        helm: Helm-related commands
    """

    def __init__(
        self,
        cwd: Path | None = None,
        *,
        helm_binary: str = "helm",
        timeout: float | None = None,
    ) -> None:
        """Initialize the shell commands executor.

        Args:
            cwd: Working directory for executed commands
            helm_binary: Helm executable name or path
            timeout: Per-invocation timeout in seconds
        """
        self._runner = CommandRunner(cwd)
        self.helm = HelmCommands(self._runner, binary=helm_binary, timeout=timeout)

    @property
    def runner(self) -> CommandRunner:
        """Get the underlying command runner."""
        return self._runner


__all__ = [
    "ShellCommands",
    "CommandRunner",
    "HelmCommands",
    "ProcessResult",
]
