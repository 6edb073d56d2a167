"""Administrator account and access token CLI commands."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create-admin")
def create_admin(
    username: str = typer.Option(..., prompt=True, help="Username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    full_name: str | None = typer.Option(None, "--full-name", help="Display name"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the account already exists (idempotent mode)",
    ),
) -> None:
    """Create an administrator account."""
    asyncio.run(_create_admin(username, email, full_name, if_not_exists=if_not_exists))


async def _create_admin(username: str, email: str, full_name: str | None, *, if_not_exists: bool = False) -> None:
    """Async implementation of admin creation."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import ValidationError
    from voting_portal.services import voter_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            user = await voter_service.create_admin(session, username, email, full_name)
            typer.echo(f"Admin '{user.username}' created")
    except ValidationError as e:
        if if_not_exists:
            typer.echo(f"User '{username}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@user_app.command("token")
def token(
    username: str = typer.Argument(..., help="Account to issue the token for"),
    expires_minutes: int | None = typer.Option(None, "--expires-minutes", help="Override token lifetime"),
) -> None:
    """Issue a bearer access token for an existing active account."""
    asyncio.run(_token(username, expires_minutes))


async def _token(username: str, expires_minutes: int | None) -> None:
    """Async implementation of token issuance."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.security import create_access_token
    from voting_portal.services import voter_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            user = await voter_service.get_user_by_username(session, username)
            if user is None or not user.is_active:
                typer.echo(f"Error: no active user '{username}'", err=True)
                raise typer.Exit(code=1)
            typer.echo(
                create_access_token(
                    subject=user.username,
                    role=user.role,
                    secret_key=settings.jwt_secret_key,
                    algorithm=settings.jwt_algorithm,
                    expires_minutes=expires_minutes or settings.jwt_access_token_expire_minutes,
                    voter_id=user.voter_id,
                )
            )
    finally:
        await dispose_engine()
