"""Shared Pydantic v2 schemas: pagination and the error body."""

import math

from pydantic import BaseModel, Field


class PaginationParams(BaseModel):
    """Page selection query parameters."""

    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    page_size: int = Field(default=20, ge=1, le=100, description="Items per page")


class PaginationMeta(BaseModel):
    """Where a page sits in the full result set."""

    total: int = Field(description="Total number of items")
    page: int = Field(description="Current page number")
    page_size: int = Field(description="Items per page")
    total_pages: int = Field(description="Total number of pages (0 when there are no items)")

    @classmethod
    def for_page(cls, total: int, page: int, page_size: int) -> "PaginationMeta":
        return cls(total=total, page=page, page_size=page_size, total_pages=math.ceil(total / page_size))


class ErrorResponse(BaseModel):
    """Body of every rejected request.

    ``code`` is the stable rejection reason clients branch on; ``detail`` is
    for people.
    """

    detail: str = Field(description="Human-readable error message")
    code: str | None = Field(default=None, description="Machine-readable rejection reason")
