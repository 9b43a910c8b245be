"""Helm command abstractions.

This module provides the Helm CLI operations used by a deployment:
repository management, cache updates and ``upgrade --install``.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from loguru import logger

from src.app.core.errors import UpstreamProcessFailure

from .types import ProcessResult

if TYPE_CHECKING:
    from .runner import CommandRunner


class HelmCommands:
    """Helm-related commands.

    Provides operations for:
    - Repository management (add, update, remove)
    - Release deployment (upgrade --install)
    - Binary discovery (version)
    """

    def __init__(
        self,
        runner: CommandRunner,
        *,
        binary: str = "helm",
        timeout: float | None = None,
    ) -> None:
        """Initialize Helm commands.

        Args:
            runner: Command runner for executing the Helm binary
            binary: Helm executable name or path
            timeout: Per-invocation timeout in seconds (None = no limit)
        """
        self._runner = runner
        self.binary = binary
        self.timeout = timeout

    # =========================================================================
    # Repository Management
    # =========================================================================

    def repo_add(self, name: str, url: str) -> ProcessResult:
        """Register a chart repository (``helm repo add <name> <url>``)."""
        return self._run(["repo", "add", name, url])

    def repo_update(self) -> ProcessResult:
        """Refresh the local chart cache (``helm repo update``)."""
        return self._run(["repo", "update"])

    def repo_remove(self, name: str) -> ProcessResult:
        """Unregister a chart repository (``helm repo remove <name>``)."""
        return self._run(["repo", "remove", name])

    # =========================================================================
    # Release Management
    # =========================================================================

    def upgrade_install(self, tokens: Sequence[str]) -> ProcessResult:
        """Deploy or upgrade a release from validated install tokens.

        Runs ``helm upgrade --install <tokens...>`` where every token is
        passed as its own argument.

        Args:
            tokens: Validated install line tokens (release, chart, flags)

        Returns:
            ProcessResult with deployment output
        """
        return self._run(["upgrade", "--install", *tokens])

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def version(self) -> str:
        """Return the short Helm client version.

        Raises:
            UpstreamProcessFailure: If the binary is missing or fails
        """
        return self._run(["version", "--short"], check=True).stdout.strip()

    def _run(self, args: list[str], *, check: bool = False) -> ProcessResult:
        result = self._runner.run(self.binary, args, timeout=self.timeout)
        if not result.success:
            logger.debug(
                f"helm {args[0]} exited with {result.exit_code}"
                f"{' (timed out)' if result.timed_out else ''}"
            )
            if check:
                raise UpstreamProcessFailure(
                    f"helm {args[0]} failed", details=result.stderr.strip()
                )
        return result
