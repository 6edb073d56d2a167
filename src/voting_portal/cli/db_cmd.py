"""Schema migration commands backed by Alembic.

The migration environment reads ``DATABASE_URL`` itself, so these commands
only choose the revision. ``--config`` points at a non-default alembic.ini.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from loguru import logger

if TYPE_CHECKING:
    from alembic.config import Config

db_app = typer.Typer()

ConfigOption = Annotated[Path, typer.Option("--config", "-c", help="Path to alembic.ini")]


def _alembic_config(path: Path) -> "Config":
    from alembic.config import Config

    if not path.is_file():
        typer.echo(f"Error: Alembic config not found at {path}", err=True)
        raise typer.Exit(code=1)
    return Config(str(path))


@db_app.command()
def upgrade(
    revision: Annotated[str, typer.Argument(help="Target revision")] = "head",
    config: ConfigOption = Path("alembic.ini"),
) -> None:
    """Migrate the election and ballot tables up to a revision."""
    from alembic import command

    logger.info(f"Upgrading database to {revision}")
    command.upgrade(_alembic_config(config), revision)
    logger.info("Database upgrade complete")


@db_app.command()
def downgrade(
    revision: Annotated[str, typer.Argument(help="Target revision")] = "-1",
    config: ConfigOption = Path("alembic.ini"),
) -> None:
    """Roll the schema back to a revision. Dropping the base revision deletes all ballots."""
    from alembic import command

    logger.warning(f"Downgrading database to {revision}")
    command.downgrade(_alembic_config(config), revision)
    logger.info("Database downgrade complete")


@db_app.command()
def current(config: ConfigOption = Path("alembic.ini")) -> None:
    """Show the revision the database is at."""
    from alembic import command

    command.current(_alembic_config(config), verbose=True)
