"""FastAPI dependencies: per-request sessions, caller identity and role gates."""

from collections.abc import AsyncGenerator, Callable
from typing import Annotated, Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voting_portal.core.config import Settings, get_settings
from voting_portal.core.database import get_session_factory
from voting_portal.core.errors import ValidationError
from voting_portal.core.security import decode_token
from voting_portal.models.user import User, UserRole
from voting_portal.schemas.voter import VoterIdentity
from voting_portal.services import voter_service

# Tokens are minted by operator tooling; there is no login route here.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_async_session() -> AsyncGenerator[AsyncSession]:
    """Yield a session that is closed when the request finishes."""
    async with get_session_factory()() as session:
        yield session


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    session: Annotated[AsyncSession, Depends(get_async_session)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> User:
    """Resolve the bearer token to an active account.

    A token carrying a ``voter_id`` claim is only honoured while the account
    still holds that voter id.

    Raises:
        HTTPException: 401 for a bad token or an unknown, inactive or
            mismatched account.
    """
    try:
        payload = decode_token(token, settings.jwt_secret_key, settings.jwt_algorithm)
    except jwt.InvalidTokenError as exc:
        raise _unauthorized() from exc

    user = (await session.execute(select(User).where(User.username == payload["sub"]))).scalar_one_or_none()
    if user is None or not user.is_active:
        raise _unauthorized()
    if "voter_id" in payload and payload["voter_id"] != user.voter_id:
        raise _unauthorized()
    return user


def require_role(*roles: str) -> Callable[..., Any]:
    """Build a dependency that admits only callers with one of ``roles``."""

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{current_user.role}' does not have access to this resource",
            )
        return current_user

    return role_checker


async def get_current_voter(
    current_user: Annotated[User, Depends(require_role(UserRole.VOTER))],
) -> VoterIdentity:
    """Return the (user id, voter id) pair ballots are recorded under.

    Raises:
        HTTPException: 403 if the voter account has no voter id.
    """
    try:
        return voter_service.identity_for(current_user)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message) from exc
