"""Database commands for the deployment record store."""

import typer

from src.app.core.services import DbManageService
from src.app.runtime.logging import configure_logging

from .shared import console, handle_error, load_cli_config, print_header

# ---------------------------------------------------------------------------
# Typer App
# ---------------------------------------------------------------------------

db_app = typer.Typer(
    name="db",
    help="Deployment record database commands.",
    no_args_is_help=True,
)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@db_app.command()
def init() -> None:
    """Create the deployment tables if they do not exist."""
    config = load_cli_config()
    configure_logging(config.logging)

    print_header("Database Init")
    database = DbManageService(config.database.url, echo=config.database.echo)
    try:
        if not database.health_check():
            handle_error("Database is not reachable", config.database.url)
        database.create_all()
    finally:
        database.dispose()

    console.print("[green]✓ Deployment tables are ready[/green]")
