"""
Response envelope models shared by every endpoint.

Successful responses are wrapped as ``{"data": ..., "pagination"?: ...}``;
errors as ``{"error": {"code", "message", "details"?}}``.
"""

from __future__ import annotations

import math
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class Pagination(BaseModel):
    """Page metadata for paginated listings."""

    total: int = Field(description="Total number of matching records")
    limit: int = Field(description="Page size")
    offset: Optional[int] = Field(default=None, description="Records skipped (offset paging)")
    page: Optional[int] = Field(default=None, description="1-based page number (page paging)")
    total_pages: Optional[int] = Field(default=None, description="Number of pages (page paging)")
    has_more: Optional[bool] = Field(default=None, description="Whether more records follow (offset paging)")

    @classmethod
    def for_offset(cls, total: int, limit: int, offset: int) -> "Pagination":
        return cls(total=total, limit=limit, offset=offset, has_more=offset + limit < total)

    @classmethod
    def for_page(cls, total: int, limit: int, page: int) -> "Pagination":
        return cls(total=total, limit=limit, page=page, total_pages=math.ceil(total / limit) if limit else 0)


class DataResponse(BaseModel, Generic[T]):
    """Success envelope."""

    data: T
    pagination: Optional[Pagination] = None


class ErrorBody(BaseModel):
    code: str = Field(description="Machine-readable error code, e.g. NOT_FOUND")
    message: str = Field(description="Human-readable message")
    details: Optional[Any] = Field(default=None, description="Extra context such as field errors")


class ErrorResponse(BaseModel):
    """Error envelope."""

    error: ErrorBody


class FieldError(BaseModel):
    field: str
    message: str


class DeletedResponse(BaseModel):
    deleted: bool = True
