"""Tests for the kube-composer CLI commands."""

import os
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import typer
from typer.testing import CliRunner

from src.app.core.errors import ValidationRejection
from src.app.runtime.context import reset_config
from src.cli import app
from src.cli.commands.shared import with_error_handling

REPOSITORY = "myrepo https://charts.example.com/repo"

runner = CliRunner()


def _completed(stdout: str = "", returncode: int = 0) -> MagicMock:
    completed = MagicMock()
    completed.stdout = stdout
    completed.stderr = "stderr text" if returncode else ""
    completed.returncode = returncode
    return completed


@pytest.fixture(autouse=True)
def cli_config(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "config:\n"
        "  auth:\n"
        "    jwt_secret: cli-test-secret\n"
        "  database:\n"
        f"    url: sqlite:///{tmp_path / 'cli.db'}\n"
        "  logging:\n"
        "    level: ERROR\n"
    )
    reset_config()
    with patch.dict(os.environ, {"CONFIG_PATH": str(path)}):
        yield path
    reset_config()


class TestCheckCommand:
    def test_prints_report_without_running_helm(self):
        with patch("subprocess.run") as mock_run:
            result = runner.invoke(app, ["check", REPOSITORY, "web myrepo/nginx"])

        assert result.exit_code == 0, result.output
        assert "0 error(s), 1 warning(s) found" in result.output
        mock_run.assert_not_called()

    def test_reports_errors(self):
        result = runner.invoke(
            app, ["check", REPOSITORY, "web myrepo/nginx --set hostNetwork=true"]
        )

        assert result.exit_code == 0, result.output
        assert "1 error(s)" in result.output

    def test_scans_chart_file(self, tmp_path: Path):
        chart = tmp_path / "rendered.yaml"
        chart.write_text("spec:\n  hostPID: true\n")

        result = runner.invoke(
            app, ["check", REPOSITORY, "web myrepo/nginx", "--chart", str(chart)]
        )

        assert result.exit_code == 0, result.output
        assert "1 error(s)" in result.output

    def test_rejected_input_exits_with_error(self):
        result = runner.invoke(app, ["check", "bad;repo https://x", "web chart"])

        assert result.exit_code == 1
        assert "Invalid repository configuration" in result.output


class TestDeployCommand:
    def test_prints_transcript(self):
        with patch("subprocess.run", return_value=_completed("ok")) as mock_run:
            result = runner.invoke(app, ["deploy", REPOSITORY, "web myrepo/nginx"])

        assert result.exit_code == 0, result.output
        assert "Helm Deployment Completed Successfully" in result.output
        argvs = [call.args[0] for call in mock_run.call_args_list]
        assert argvs[2] == ["helm", "upgrade", "--install", "web", "myrepo/nginx"]

    def test_install_failure_exits_non_zero(self):
        def fake_run(argv, **kwargs):
            return _completed(returncode=1 if argv[1] == "upgrade" else 0)

        with patch("subprocess.run", side_effect=fake_run):
            result = runner.invoke(app, ["deploy", REPOSITORY, "web myrepo/nginx"])

        assert result.exit_code == 1
        assert "Deployment failed" in result.output
        assert "stderr text" not in result.output


class TestDbCommand:
    def test_init_creates_tables(self, tmp_path: Path):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "cli.db").exists()


def test_with_error_handling_handles_pipeline_error():
    @with_error_handling
    def _command() -> None:
        raise ValidationRejection("Invalid input", details="secret detail")

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 1


def test_with_error_handling_handles_keyboard_interrupt():
    @with_error_handling
    def _command() -> None:
        raise KeyboardInterrupt

    with pytest.raises(typer.Exit) as excinfo:
        _command()

    assert excinfo.value.exit_code == 130
