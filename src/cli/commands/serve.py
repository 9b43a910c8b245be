"""API server command."""

from typing import Annotated

import typer

from .shared import console, load_cli_config, print_header


def serve(
    host: Annotated[
        str | None,
        typer.Option("--host", help="Bind address (defaults to app.host)"),
    ] = None,
    port: Annotated[
        int | None,
        typer.Option("--port", "-p", help="Bind port (defaults to app.port)"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", help="Restart the server when source files change"),
    ] = False,
) -> None:
    """Run the deployment API with uvicorn."""
    import uvicorn

    config = load_cli_config()
    bind_host = host or config.app.host
    bind_port = port or config.app.port

    print_header(f"{config.app.name} API")
    console.print(f"Listening on [cyan]http://{bind_host}:{bind_port}[/cyan]")

    uvicorn.run(
        "src.app.api.http.app:create_app",
        factory=True,
        host=bind_host,
        port=bind_port,
        reload=reload,
        log_config=None,
    )
