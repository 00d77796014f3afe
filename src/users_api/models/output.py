"""
Output models for API responses using Pydantic.

Responses are serialized with ``model_dump_json(by_alias=True)`` so the wire
format keeps its camelCase keys while the Python side stays snake_case.
"""

from typing import Annotated, Any

from pydantic import BaseModel, Field


class PaginationOutput(BaseModel):
    """Effective pagination echoed back to the caller."""

    limit: Annotated[int, Field(
        description='Limit applied to the query',
        examples=[10]
    )]

    offset: Annotated[int, Field(
        description='Offset applied to the query',
        examples=[0]
    )]

    next_offset: Annotated[int, Field(
        serialization_alias='nextOffset',
        description='Offset to request the following page',
        examples=[10]
    )]


class ListUsersOutput(BaseModel):
    """Response model for a page of users."""

    message: Annotated[str, Field(
        default='Success',
        description='Outcome message'
    )] = 'Success'

    data: Annotated[list[dict[str, Any]], Field(
        description='User rows as returned by the database'
    )]

    pagination: PaginationOutput


class EchoOutput(BaseModel):
    """Response model for POST requests, echoing the parsed body."""

    message: Annotated[str, Field(
        default='POST request successful',
        description='Outcome message'
    )] = 'POST request successful'

    body: Annotated[Any, Field(
        description='Parsed JSON request body'
    )]


class ErrorOutput(BaseModel):
    """Standard error response model. Carries no internal error detail."""

    message: Annotated[str, Field(
        description='Safe, user-facing error message',
        examples=['Database connection failed', 'Method not allowed']
    )]

    error_type: Annotated[str, Field(
        serialization_alias='errorType',
        description='Error kind label',
        examples=['DATABASE_UNAVAILABLE', 'METHOD_NOT_ALLOWED']
    )]
