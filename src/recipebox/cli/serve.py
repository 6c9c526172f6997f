"""CLI command for running the API server.

Usage:
    recipebox serve
    recipebox serve --host 127.0.0.1 --port 9000
    recipebox serve --reload --log-level debug

Defaults come from ``RECIPEBOX_HOST``, ``RECIPEBOX_PORT`` and
``RECIPEBOX_LOG_LEVEL``. Store and cache connections are opened by the
application lifespan in each worker.
"""

from __future__ import annotations

import typer

from recipebox.config import settings

APP_FACTORY = "recipebox.api.app:create_app"

app = typer.Typer(help="Run the RecipeBox API server")


@app.callback(invoke_without_command=True)
def serve(
    host: str = typer.Option(settings.host, "--host", "-h", help="Interface to bind"),
    port: int = typer.Option(settings.port, "--port", "-p", help="TCP port"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Restart on code changes"),
    workers: int = typer.Option(1, "--workers", "-w", min=1, help="Worker processes"),
    log_level: str = typer.Option(
        settings.log_level.lower(), "--log-level", "-l", help="uvicorn log level"
    ),
) -> None:
    """Serve the recipes API with uvicorn."""
    import uvicorn

    if reload and workers > 1:
        typer.echo("--reload runs a single worker; ignoring --workers", err=True)
        workers = 1

    typer.echo(f"RecipeBox listening on http://{host}:{port} ({workers} worker(s))")

    uvicorn.run(
        app=APP_FACTORY,
        factory=True,
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level.lower(),
    )
