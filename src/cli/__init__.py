"""Main CLI application module.

Entry point for ``kube-composer-cli``.

Commands:
- check: Validate a repository and install line, print the security report
- deploy: Run the Helm pipeline locally and print the transcript
- serve: Run the deployment API
- db: Deployment record database commands
"""

import typer

from .commands import check, db_app, deploy, serve

# Create the main CLI application
app = typer.Typer(
    help="kube-composer CLI - validated Helm deployments",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command()(check)
app.command()(deploy)
app.command()(serve)
app.add_typer(db_app, name="db")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
