"""Translation of business-rule errors into HTTP responses."""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from voting_portal.core.errors import VotingError
from voting_portal.schemas.common import ErrorResponse


def voting_error_response(exc: VotingError) -> JSONResponse:
    """Render a VotingError as ``ErrorResponse`` with its own status code."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(detail=exc.message, code=exc.code).model_dump(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register handlers so every rejection carries a distinct reason code.

    Unexpected errors are logged with their traceback and answered with a
    generic 500 that exposes no storage detail.
    """

    @app.exception_handler(VotingError)
    async def voting_error_handler(request: Request, exc: VotingError) -> JSONResponse:
        return voting_error_response(exc)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.opt(exception=exc).error(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(detail="Internal server error", code="internal_error").model_dump(),
        )
