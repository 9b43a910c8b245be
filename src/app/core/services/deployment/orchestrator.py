"""Helm deployment orchestration.

The orchestrator runs one deployment as a linear sequence of steps:

    ValidateRepo -> ValidateInstallLine -> RunSecurityCheck -> AddRepo
    -> UpdateRepoCache -> Install -> RemoveRepo -> Done

Validation failures raise before any process is started. The security check
is advisory and never stops the pipeline. Only the Install step is fatal;
repository add, update and remove failures are noted and the pipeline goes on.

Every step appends fixed text (and the stdout of successful commands) to one
transcript. Process stderr is logged server-side and never copied into the
transcript.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from loguru import logger

from src.app.core.security import (
    HelmValueMap,
    RepositorySpec,
    SecurityReport,
    ValidatedCommandLine,
    extract_namespace,
    extract_release,
    parse_helm_values,
    validate_helm_chart,
    validate_helm_install,
    validate_repository,
)
from src.app.core.security.input_validation import (
    HELM_INSTALL_MAX_LENGTH,
    REPOSITORY_MAX_LENGTH,
    TokenPolicy,
)

from .locks import RepositoryLocks

if TYPE_CHECKING:
    from src.infra.shell_commands import HelmCommands, ProcessResult

DEPLOYMENT_FAILED_MESSAGE = "Deployment failed"

START_HEADER = "=== Starting Helm Deployment ===\n"
SECURITY_HEADER = "=== Security Check ==="
SUCCESS_FOOTER = "\n=== Helm Deployment Completed Successfully ==="
FAILURE_FOOTER = "\n=== Helm Deployment Failed ==="

ADD_REPO_NOTE = (
    "Note: Repository might already exist or there was a warning (continuing)\n"
)
UPDATE_REPO_NOTE = "Helm repo update completed with warnings\n"
INSTALL_FAILED_NOTE = "Helm upgrade failed"
REMOVE_REPO_NOTE = "Warning: Failed to remove repository\n"


class DeploymentStatus(str, Enum):
    """Final status of a deployment attempt."""

    DEPLOYED = "deployed"
    FAILED = "failed"


@dataclass(frozen=True)
class DeploymentPlan:
    """Validated inputs and security analysis for one deployment."""

    repository: RepositorySpec
    command_line: ValidatedCommandLine
    values: HelmValueMap
    security_report: SecurityReport
    namespace: str
    release: str | None


@dataclass
class DeploymentOutcome:
    """Result of a deployment attempt that passed validation.

    Attributes:
        success: Whether the Install step succeeded
        transcript: Aggregated output of every step, in step order
        security_report: Advisory findings for the install values
        namespace: Target namespace (from -n/--namespace or the default)
        release: Release name (first positional install token)
        error: Generic client-facing error when ``success`` is False
    """

    success: bool
    transcript: str
    security_report: SecurityReport
    namespace: str
    release: str | None = None
    error: str | None = None

    @property
    def status(self) -> DeploymentStatus:
        return DeploymentStatus.DEPLOYED if self.success else DeploymentStatus.FAILED


@dataclass
class _Transcript:
    lines: list[str] = field(default_factory=list)

    def add(self, line: str) -> None:
        self.lines.append(line)

    def add_output(self, result: ProcessResult, fallback: str) -> None:
        self.lines.append(result.stdout if result.success else fallback)

    def text(self) -> str:
        return "\n".join(self.lines)


class DeploymentOrchestrator:
    """Sequences validation, security analysis and Helm invocations.

    Example:
        ```python
        orchestrator = DeploymentOrchestrator(commands.helm)
        outcome = orchestrator.deploy(
            "myrepo https://charts.example.com/repo",
            "myrelease myrepo/mychart --set replicaCount=3",
        )
        ```
    """

    def __init__(
        self,
        helm: HelmCommands,
        *,
        locks: RepositoryLocks | None = None,
        default_namespace: str = "default",
        token_policy: TokenPolicy = "denylist",
        repository_max_length: int = REPOSITORY_MAX_LENGTH,
        install_max_length: int = HELM_INSTALL_MAX_LENGTH,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            helm: Helm command wrapper used for every external call
            locks: Shared per-repository locks (a private registry if None)
            default_namespace: Namespace recorded when the install line has none
            token_policy: Install line token policy (see input_validation)
            repository_max_length: Maximum repository string length
            install_max_length: Maximum install line length
        """
        self.helm = helm
        self.locks = locks or RepositoryLocks()
        self.default_namespace = default_namespace
        self.token_policy = token_policy
        self.repository_max_length = repository_max_length
        self.install_max_length = install_max_length

    # =========================================================================
    # Validation and analysis
    # =========================================================================

    def prepare(self, repository: str, helm_install: str) -> DeploymentPlan:
        """Validate both inputs and run the security check.

        Raises:
            ValidationRejection: If either input fails validation
        """
        repo = validate_repository(repository, max_length=self.repository_max_length)
        command_line = validate_helm_install(
            helm_install,
            max_length=self.install_max_length,
            token_policy=self.token_policy,
        )

        values = parse_helm_values(command_line)
        # No chart templates are available before install.
        report = validate_helm_chart("", values)

        return DeploymentPlan(
            repository=repo,
            command_line=command_line,
            values=values,
            security_report=report,
            namespace=extract_namespace(command_line, self.default_namespace),
            release=extract_release(command_line),
        )

    # =========================================================================
    # Execution
    # =========================================================================

    def deploy(self, repository: str, helm_install: str) -> DeploymentOutcome:
        """Run the full deployment pipeline.

        Args:
            repository: Untrusted ``"<name> <https-url>"`` string
            helm_install: Untrusted install line for ``helm upgrade --install``

        Returns:
            DeploymentOutcome describing the attempt

        Raises:
            ValidationRejection: If either input fails validation. Nothing
                is executed in that case.
        """
        plan = self.prepare(repository, helm_install)
        return self.execute(plan)

    def execute(self, plan: DeploymentPlan) -> DeploymentOutcome:
        """Run the Helm steps of a prepared plan."""
        transcript = _Transcript()
        transcript.add(START_HEADER)
        self._record_security_report(transcript, plan.security_report)

        repo = plan.repository
        with self.locks.hold(repo.name):
            transcript.add(f"Adding helm repository: {repo.name}")
            result = self.helm.repo_add(repo.name, repo.url)
            transcript.add_output(result, ADD_REPO_NOTE)
            self._log_non_fatal("repo add", result)

            transcript.add("Updating helm repository cache...")
            result = self.helm.repo_update()
            transcript.add_output(result, UPDATE_REPO_NOTE)
            self._log_non_fatal("repo update", result)

            transcript.add(f"\nDeploying with: {plan.command_line.as_text()}")
            result = self.helm.upgrade_install(plan.command_line.tokens)
            if not result.success:
                logger.error(
                    f"helm upgrade --install failed for release '{plan.release}' "
                    f"(exit {result.exit_code}, timed out: {result.timed_out}): "
                    f"{result.stderr.strip()}"
                )
                transcript.add(INSTALL_FAILED_NOTE)
                transcript.add(FAILURE_FOOTER)
                return self._outcome(
                    plan, transcript, success=False, error=DEPLOYMENT_FAILED_MESSAGE
                )
            transcript.add(result.stdout)

            transcript.add(f"\nRemoving temporary repository: {repo.name}")
            result = self.helm.repo_remove(repo.name)
            transcript.add_output(result, REMOVE_REPO_NOTE)
            if not result.success:
                logger.warning(
                    f"Failed to remove repository '{repo.name}': {result.stderr.strip()}"
                )

        transcript.add(SUCCESS_FOOTER)
        logger.info(
            f"Deployed release '{plan.release}' to namespace '{plan.namespace}'"
        )
        return self._outcome(plan, transcript, success=True)

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _record_security_report(
        transcript: _Transcript, report: SecurityReport
    ) -> None:
        transcript.add(SECURITY_HEADER)
        transcript.add(report.summary)
        for finding in report.findings():
            transcript.add(
                f"[{finding.severity.value.upper()}] {finding.name}: {finding.message}"
            )
        if report.has_errors:
            logger.warning(
                f"Security check reported errors (not blocking): {report.summary}"
            )

    @staticmethod
    def _log_non_fatal(step: str, result: ProcessResult) -> None:
        if not result.success:
            logger.info(
                f"helm {step} failed with exit {result.exit_code} (continuing): "
                f"{result.stderr.strip()}"
            )

    @staticmethod
    def _outcome(
        plan: DeploymentPlan,
        transcript: _Transcript,
        *,
        success: bool,
        error: str | None = None,
    ) -> DeploymentOutcome:
        return DeploymentOutcome(
            success=success,
            transcript=transcript.text(),
            security_report=plan.security_report,
            namespace=plan.namespace,
            release=plan.release,
            error=error,
        )
