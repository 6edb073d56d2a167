"""``voting-portal`` command line: the API server plus operator subcommands."""

import typer

from voting_portal.core.config import get_settings
from voting_portal.core.logging import setup_logging

app = typer.Typer(name="voting-portal", help="Run and administer the online voting portal")


@app.callback()
def _configure() -> None:
    """Load settings and install log sinks before any subcommand runs."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir)


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to listen on"),  # noqa: S104
    port: int = typer.Option(8000, "--port", help="TCP port to listen on"),
    reload: bool = typer.Option(False, "--reload", help="Restart on code changes (development only)"),
) -> None:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run("voting_portal.main:create_app", factory=True, host=host, port=port, reload=reload)


def _register_subcommands() -> None:
    from voting_portal.cli.db_cmd import db_app
    from voting_portal.cli.election_cmd import election_app
    from voting_portal.cli.user_cmd import user_app
    from voting_portal.cli.voter_cmd import voter_app

    for sub_app, name, help_text in (
        (db_app, "db", "Apply or roll back schema migrations"),
        (user_app, "user", "Create administrators and mint bearer tokens"),
        (voter_app, "voter", "Register and list voters"),
        (election_app, "election", "Create elections, change status, read results"),
    ):
        app.add_typer(sub_app, name=name, help=help_text)


_register_subcommands()
