"""Unit tests for the deployment orchestrator with a stubbed Helm runner."""

import pytest

from src.app.core.errors import ValidationRejection
from src.app.core.services import DeploymentOrchestrator, DeploymentStatus
from src.app.core.services.deployment.orchestrator import (
    ADD_REPO_NOTE,
    INSTALL_FAILED_NOTE,
    REMOVE_REPO_NOTE,
    UPDATE_REPO_NOTE,
)
from src.infra.shell_commands import ProcessResult

REPOSITORY = "myrepo https://charts.example.com/repo"
INSTALL = "myrelease myrepo/mychart --set replicaCount=3"
FAILED = ProcessResult(stdout="", stderr="Error: secret-bearing stderr", exit_code=1)


class TestHappyPath:
    def test_runs_all_steps_in_order(self, orchestrator: DeploymentOrchestrator, fake_runner):
        outcome = orchestrator.deploy(REPOSITORY, INSTALL)

        assert fake_runner.calls == [
            ["helm", "repo", "add", "myrepo", "https://charts.example.com/repo"],
            ["helm", "repo", "update"],
            [
                "helm",
                "upgrade",
                "--install",
                "myrelease",
                "myrepo/mychart",
                "--set",
                "replicaCount=3",
            ],
            ["helm", "repo", "remove", "myrepo"],
        ]
        assert outcome.success
        assert outcome.status == DeploymentStatus.DEPLOYED
        assert outcome.error is None
        assert outcome.release == "myrelease"
        assert outcome.namespace == "default"

    def test_transcript_layout(self, orchestrator: DeploymentOrchestrator, fake_runner):
        fake_runner.program("repo add", ProcessResult(stdout='"myrepo" has been added'))
        fake_runner.program("upgrade", ProcessResult(stdout="Release installed"))

        transcript = orchestrator.deploy(REPOSITORY, INSTALL).transcript

        assert transcript.startswith("=== Starting Helm Deployment ===\n")
        assert "=== Security Check ===\n0 error(s), 1 warning(s) found" in transcript
        assert "[WARNING] missing-resource-limits:" in transcript
        assert 'Adding helm repository: myrepo\n"myrepo" has been added' in transcript
        assert "Updating helm repository cache..." in transcript
        assert "\nDeploying with: myrelease myrepo/mychart --set replicaCount=3\nRelease installed" in transcript
        assert "\nRemoving temporary repository: myrepo" in transcript
        assert transcript.endswith("\n=== Helm Deployment Completed Successfully ===")

    def test_security_findings_do_not_block(
        self, orchestrator: DeploymentOrchestrator, fake_runner
    ):
        outcome = orchestrator.deploy(
            REPOSITORY, "rel myrepo/chart --set securityContext.privileged=true"
        )

        assert outcome.success
        assert outcome.security_report.has_errors
        assert "[ERROR] privileged-container:" in outcome.transcript
        assert len(fake_runner.calls) == 4

    def test_pull_policy_warning_still_deploys(
        self, orchestrator: DeploymentOrchestrator, fake_runner
    ):
        outcome = orchestrator.deploy(
            REPOSITORY,
            "rel myrepo/chart --set image.pullPolicy=Never --set resources.limits.cpu=1",
        )

        report = outcome.security_report
        assert outcome.success
        assert report.errors == []
        assert [f.name for f in report.warnings] == ["image-pull-policy"]

    def test_namespace_is_taken_from_install_line(self, orchestrator: DeploymentOrchestrator):
        outcome = orchestrator.deploy(REPOSITORY, "rel myrepo/chart -n apps")
        assert outcome.namespace == "apps"


class TestRejection:
    @pytest.mark.parametrize(
        ("repository", "install"),
        [
            ("bad;repo https://example.com", INSTALL),
            (REPOSITORY, "rel chart; rm -rf /"),
            ("myrepo http://example.com", INSTALL),
            (REPOSITORY, ""),
        ],
    )
    def test_rejects_before_any_process_runs(
        self, orchestrator: DeploymentOrchestrator, fake_runner, repository: str, install: str
    ):
        with pytest.raises(ValidationRejection):
            orchestrator.deploy(repository, install)

        assert fake_runner.calls == []

    def test_allowlist_policy(self, helm_commands, fake_runner):
        orchestrator = DeploymentOrchestrator(helm_commands, token_policy="allowlist")

        with pytest.raises(ValidationRejection):
            orchestrator.deploy(REPOSITORY, "rel chart --set motd=hi!")

        assert fake_runner.calls == []


class TestNonFatalSteps:
    def test_repo_failures_are_noted_and_skipped(
        self, orchestrator: DeploymentOrchestrator, fake_runner
    ):
        fake_runner.program("repo add", FAILED)
        fake_runner.program("repo update", FAILED)
        fake_runner.program("repo remove", FAILED)

        outcome = orchestrator.deploy(REPOSITORY, INSTALL)

        assert outcome.success
        assert ADD_REPO_NOTE in outcome.transcript
        assert UPDATE_REPO_NOTE in outcome.transcript
        assert REMOVE_REPO_NOTE in outcome.transcript
        assert "secret-bearing stderr" not in outcome.transcript


class TestInstallFailure:
    def test_aborts_before_repo_remove(self, orchestrator: DeploymentOrchestrator, fake_runner):
        fake_runner.program("upgrade", FAILED)

        outcome = orchestrator.deploy(REPOSITORY, INSTALL)

        assert fake_runner.subcommands == ["repo add", "repo update", "upgrade"]
        assert not outcome.success
        assert outcome.status == DeploymentStatus.FAILED
        assert outcome.error == "Deployment failed"
        assert INSTALL_FAILED_NOTE in outcome.transcript
        assert outcome.transcript.endswith("\n=== Helm Deployment Failed ===")
        assert "Removing temporary repository" not in outcome.transcript
        assert "secret-bearing stderr" not in outcome.transcript

    def test_timeout_is_an_install_failure(
        self, orchestrator: DeploymentOrchestrator, fake_runner
    ):
        fake_runner.program("upgrade", ProcessResult(exit_code=124, timed_out=True))

        outcome = orchestrator.deploy(REPOSITORY, INSTALL)

        assert not outcome.success
        assert outcome.error == "Deployment failed"

    def test_lock_is_released_after_failure(
        self, orchestrator: DeploymentOrchestrator, fake_runner
    ):
        fake_runner.program("upgrade", FAILED)
        orchestrator.deploy(REPOSITORY, INSTALL)

        assert not orchestrator.locks.is_locked("myrepo")
