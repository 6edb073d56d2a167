"""Voter registration CLI commands."""

import asyncio

import typer

voter_app = typer.Typer()


@voter_app.command("register")
def register(
    username: str = typer.Option(..., prompt=True, help="Username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    full_name: str | None = typer.Option(None, "--full-name", help="Display name"),
) -> None:
    """Register a voter and print the generated voter ID."""
    asyncio.run(_register(username, email, full_name))


async def _register(username: str, email: str, full_name: str | None) -> None:
    """Async implementation of voter registration."""
    from pydantic import ValidationError as SchemaValidationError

    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import VotingError
    from voting_portal.schemas.voter import VoterRegisterRequest
    from voting_portal.services import voter_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        request = VoterRegisterRequest(username=username, email=email, full_name=full_name)
        factory = get_session_factory()
        async with factory() as session:
            user = await voter_service.register_voter(
                session,
                request,
                voter_id_prefix=settings.voter_id_prefix,
                max_attempts=settings.voter_id_max_attempts,
            )
            typer.echo(f"Voter '{user.username}' registered with voter ID {user.voter_id}")
    except SchemaValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@voter_app.command("list")
def list_voters(
    page: int = typer.Option(1, "--page", min=1, help="Page number"),
    page_size: int = typer.Option(50, "--page-size", min=1, max=500, help="Voters per page"),
) -> None:
    """List registered voters."""
    asyncio.run(_list_voters(page, page_size))


async def _list_voters(page: int, page_size: int) -> None:
    """Async implementation of voter listing."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.services import voter_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            voters, total = await voter_service.list_voters(session, page, page_size)
            typer.echo(f"{'Username':<20} {'Voter ID':<12} {'Email':<30} {'Active':<8}")
            typer.echo("-" * 72)
            for voter in voters:
                typer.echo(f"{voter.username:<20} {voter.voter_id or '':<12} {voter.email:<30} {voter.is_active!s:<8}")
            typer.echo(f"\nTotal: {total}")
    finally:
        await dispose_engine()
