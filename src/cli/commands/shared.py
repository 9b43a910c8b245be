"""Shared utilities for CLI commands.

Console output, error handling and configuration access used by every
command module.
"""

from collections.abc import Callable
from functools import wraps

import typer
from rich.console import Console
from rich.panel import Panel

from src.app.core.errors import DeploymentPipelineError
from src.app.runtime.config.config_data import ConfigData

# Shared console instance for consistent output
console = Console()


def handle_error(message: str, details: str | None = None, exit_code: int = 1) -> None:
    """Handle an error by printing a message and exiting.

    Args:
        message: Error message to display
        details: Optional additional details
        exit_code: Exit code to use
    """
    console.print(f"\n[bold red]❌ {message}[/bold red]\n")
    if details:
        console.print(Panel(details, title="Details", border_style="red"))
    raise typer.Exit(exit_code)


def print_header(title: str, style: str = "blue") -> None:
    """Print a styled header panel."""
    console.print(
        Panel.fit(
            f"[bold {style}]{title}[/bold {style}]",
            border_style=style,
        )
    )


def load_cli_config() -> ConfigData:
    """Load config.yaml (or ``CONFIG_PATH``), exiting cleanly on failure."""
    from src.app.runtime.context import get_config

    try:
        return get_config()
    except (OSError, ValueError) as e:
        handle_error("Failed to load configuration", str(e))
        raise typer.Exit(1) from e


def with_error_handling(func: Callable[..., None]) -> Callable[..., None]:
    """Decorator to wrap command functions with standard error handling.

    Pipeline errors are shown with their client-facing message; the
    details stay in the log.
    """

    @wraps(func)
    def wrapper(*args: object, **kwargs: object) -> None:
        try:
            func(*args, **kwargs)
        except DeploymentPipelineError as e:
            handle_error(e.message)
        except KeyboardInterrupt:
            console.print("\n[dim]Operation cancelled by user.[/dim]")
            raise typer.Exit(130) from None

    return wrapper
