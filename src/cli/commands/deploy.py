"""Local deployment commands.

``check`` validates a repository and install line and prints the security
report without running Helm. ``deploy`` runs the full pipeline against the
local Helm binary and prints the transcript.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from src.app.core.security import SecurityReport
from src.app.core.services import DeploymentOrchestrator
from src.app.runtime.config.config_data import ConfigData
from src.app.runtime.logging import configure_logging
from src.infra.shell_commands import ShellCommands

from .shared import console, handle_error, load_cli_config, print_header, with_error_handling

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_orchestrator(config: ConfigData) -> DeploymentOrchestrator:
    commands = ShellCommands(
        helm_binary=config.helm.binary,
        timeout=config.helm.timeout_seconds,
    )
    return DeploymentOrchestrator(
        commands.helm,
        default_namespace=config.helm.default_namespace,
        token_policy=config.helm.token_policy,
        repository_max_length=config.helm.repository_max_length,
        install_max_length=config.helm.install_max_length,
    )


def print_security_report(report: SecurityReport) -> None:
    """Render findings as a table, errors first."""
    if report.is_clean:
        console.print(f"[green]✓ {report.summary}[/green]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Severity")
    table.add_column("Rule")
    table.add_column("Message")
    for finding in report.findings():
        color = "red" if finding.severity.value == "error" else "yellow"
        table.add_row(
            f"[{color}]{finding.severity.value.upper()}[/{color}]",
            finding.name,
            finding.message,
        )
    console.print(table)
    console.print(f"[bold]{report.summary}[/bold]")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@with_error_handling
def check(
    repository: Annotated[
        str,
        typer.Argument(help="Repository alias and https URL, e.g. 'bitnami https://charts.bitnami.com/bitnami'"),
    ],
    helm_install: Annotated[
        str,
        typer.Argument(help="Arguments for 'helm upgrade --install'"),
    ],
    chart: Annotated[
        Path | None,
        typer.Option(
            "--chart",
            "-c",
            help="Rendered chart YAML to scan in addition to the --set values",
            exists=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
) -> None:
    """Validate inputs and print the security report without running Helm."""
    from src.app.core.security import validate_helm_chart

    config = load_cli_config()
    configure_logging(config.logging)

    plan = _build_orchestrator(config).prepare(repository, helm_install)
    report = plan.security_report
    if chart is not None:
        report = validate_helm_chart(chart.read_text(encoding="utf-8"), plan.values)

    print_header("Security Check")
    console.print(f"Repository: [cyan]{plan.repository.name}[/cyan] ({plan.repository.url})")
    console.print(f"Release:    [cyan]{plan.release or '-'}[/cyan]")
    console.print(f"Namespace:  [cyan]{plan.namespace}[/cyan]\n")
    print_security_report(report)


@with_error_handling
def deploy(
    repository: Annotated[
        str,
        typer.Argument(help="Repository alias and https URL"),
    ],
    helm_install: Annotated[
        str,
        typer.Argument(help="Arguments for 'helm upgrade --install'"),
    ],
) -> None:
    """Run the deployment pipeline with the local Helm binary."""
    config = load_cli_config()
    configure_logging(config.logging)

    print_header("Helm Deployment")
    with console.status("[bold cyan]Running Helm...[/bold cyan]"):
        outcome = _build_orchestrator(config).deploy(repository, helm_install)

    console.print(outcome.transcript, markup=False, highlight=False)
    if not outcome.success:
        handle_error(outcome.error or "Deployment failed")

    console.print(f"\n[bold green]✓ Release deployed to namespace {outcome.namespace}[/bold green]")
