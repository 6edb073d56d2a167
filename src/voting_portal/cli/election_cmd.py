"""CLI commands for election administration.

Provides creation from a JSON definition, explicit status transitions,
result reporting, and repair of cached per-candidate vote counters.
"""

import asyncio
import uuid
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from voting_portal.models.election import ElectionStatus

election_app = typer.Typer()


@election_app.command("create")
def create(
    file: Annotated[
        Path,
        typer.Option("--file", exists=True, dir_okay=False, readable=True, help="Election definition (JSON)"),
    ],
    created_by: Annotated[str | None, typer.Option("--created-by", help="Username of the creating admin")] = None,
) -> None:
    """Create an election, its candidates, and its voter roster from a JSON file.

    The file holds ``title``, ``description``, ``start_date``, ``end_date``,
    ``candidates`` (list of ``{"name", "description"}``), and ``voter_ids``.
    """
    asyncio.run(_create_impl(file, created_by))


async def _create_impl(file: Path, created_by: str | None) -> None:
    """Async implementation of the create command."""
    from pydantic import ValidationError as SchemaValidationError

    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import VotingError
    from voting_portal.schemas.election import ElectionCreateRequest
    from voting_portal.services import election_service, voter_service

    try:
        request = ElectionCreateRequest.model_validate_json(file.read_text(encoding="utf-8"))
    except SchemaValidationError as e:
        typer.echo(f"Error: invalid election definition in {file}:\n{e}", err=True)
        raise typer.Exit(code=1) from e

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            creator_id = None
            if created_by is not None:
                creator = await voter_service.get_user_by_username(session, created_by)
                if creator is None or not creator.is_admin:
                    typer.echo(f"Error: '{created_by}' is not an admin account", err=True)
                    raise typer.Exit(code=1)
                creator_id = creator.id
            election = await election_service.create_election(session, request, created_by=creator_id)
            typer.echo(f"Created election {election.id}: {election.title} ({election.status})")
            for candidate in election.candidates:
                typer.echo(f"  {candidate.position + 1}. {candidate.name} [{candidate.id}]")
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@election_app.command("status")
def set_status(
    election_id: Annotated[uuid.UUID, typer.Argument(help="Election UUID")],
    new_status: Annotated[ElectionStatus, typer.Argument(help="New status")],
) -> None:
    """Set an election's status explicitly."""
    asyncio.run(_status_impl(election_id, new_status))


async def _status_impl(election_id: uuid.UUID, new_status: ElectionStatus) -> None:
    """Async implementation of the status command."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import VotingError
    from voting_portal.services import election_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            election = await election_service.set_status(session, election_id, new_status)
            typer.echo(f"Election {election.id} is now {election.status}")
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@election_app.command("results")
def results(
    election_id: Annotated[uuid.UUID, typer.Argument(help="Election UUID")],
) -> None:
    """Print per-candidate counts recomputed from stored ballots."""
    asyncio.run(_results_impl(election_id))


async def _results_impl(election_id: uuid.UUID) -> None:
    """Async implementation of the results command."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import VotingError
    from voting_portal.services import tally_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            tally = await tally_service.results_for(session, election_id)
            typer.echo(f"{tally.title} ({tally.status})")
            typer.echo(f"{'Candidate':<40} {'Votes':>8}")
            typer.echo("-" * 49)
            for row in tally.candidates:
                typer.echo(f"{row.name:<40} {row.vote_count:>8}")
            typer.echo(f"\nTotal: {tally.total_votes} of {tally.eligible_voter_count} eligible")
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()


@election_app.command("reconcile")
def reconcile(
    election_id: Annotated[uuid.UUID, typer.Argument(help="Election UUID")],
) -> None:
    """Rewrite cached candidate vote counters from stored ballots."""
    asyncio.run(_reconcile_impl(election_id))


async def _reconcile_impl(election_id: uuid.UUID) -> None:
    """Async implementation of the reconcile command."""
    from voting_portal.core.config import get_settings
    from voting_portal.core.database import dispose_engine, get_session_factory, init_engine
    from voting_portal.core.errors import VotingError
    from voting_portal.services import candidate_service, election_service

    settings = get_settings()
    init_engine(settings.database_url, schema=settings.database_schema, busy_timeout=settings.database_busy_timeout)

    try:
        factory = get_session_factory()
        async with factory() as session:
            await election_service.require_election(session, election_id)
            logger.info(f"Reconciling vote counters for election {election_id}")
            corrected = await candidate_service.reconcile_vote_counts(session, election_id)
            typer.echo(f"Corrected {corrected} candidate counter(s)")
    except VotingError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    finally:
        await dispose_engine()
