"""Command line entry point for maintaining the activity log service."""

import typer
from rich.console import Console
from sqlmodel import Session

from .application.log_reader import clean_logs
from .config import settings
from .infrastructure.database.database import get_main_engine, init_db
from .logging_config import setup_logging

console = Console()

app = typer.Typer(
    help="LMS activity log maintenance",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.command("init-db")
def init_db_command() -> None:
    """Create all tables in the configured database."""
    setup_logging()
    init_db(get_main_engine())
    console.print(
        f"[green]✓[/green] Database ready at {settings.effective_database_url}"
    )


@app.command("clean-logs")
def clean_logs_command(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation"),
) -> None:
    """Delete every activity log entry."""
    setup_logging()
    if not yes:
        typer.confirm("Delete the whole activity log?", abort=True)

    with Session(get_main_engine()) as session:
        deleted = clean_logs(session)
    console.print(f"[green]✓[/green] Removed {deleted} log entries")


@app.command("serve")
def serve_command(
    host: str = typer.Option(settings.host, help="Interface to bind"),
    port: int = typer.Option(settings.port, help="Port to listen on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("lms_activity.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
