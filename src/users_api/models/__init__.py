"""
Service Models Package

Pydantic models for request parsing, API responses, database credentials and
custom resource events.
"""

from .credentials import DatabaseCredentials
from .custom_resource import (
    CustomResourceEvent,
    CustomResourceResponse,
    RequestType,
    ResponseStatus,
)
from .input import PaginationRequest
from .output import EchoOutput, ErrorOutput, ListUsersOutput, PaginationOutput
from .user import UserStatus

__all__ = [
    # Input models
    "PaginationRequest",

    # Output models
    "ListUsersOutput",
    "PaginationOutput",
    "EchoOutput",
    "ErrorOutput",

    # Domain models
    "DatabaseCredentials",
    "UserStatus",

    # Custom resource models
    "CustomResourceEvent",
    "CustomResourceResponse",
    "RequestType",
    "ResponseStatus",
]
