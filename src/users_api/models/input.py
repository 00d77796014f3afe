"""
Input models for request validation using Pydantic.

Query-string values arrive as optional strings; these models turn them into
typed, bounded values before anything touches the database.
"""

from typing import Annotated, Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_LIMIT = 10
DEFAULT_OFFSET = 0
MAX_LIMIT = 100
# Largest value PostgreSQL accepts for OFFSET (bigint)
MAX_OFFSET = 2**63 - 1


class PaginationRequest(BaseModel):
    """Pagination parameters for the users listing."""

    limit: Annotated[int, Field(
        default=DEFAULT_LIMIT,
        description='Maximum number of users to return, clamped to [0, 100]',
        examples=[10, 50]
    )] = DEFAULT_LIMIT

    offset: Annotated[int, Field(
        default=DEFAULT_OFFSET,
        description='Number of users to skip, clamped to [0, 2**63 - 1]',
        examples=[0, 20]
    )] = DEFAULT_OFFSET

    @field_validator('limit')
    @classmethod
    def clamp_limit(cls, v: int) -> int:
        """Clamp the limit into [0, MAX_LIMIT]; out-of-range values are not rejected."""
        return max(min(v, MAX_LIMIT), 0)

    @field_validator('offset')
    @classmethod
    def clamp_offset(cls, v: int) -> int:
        """Clamp the offset into [0, MAX_OFFSET]."""
        return min(max(v, 0), MAX_OFFSET)

    @property
    def next_offset(self) -> int:
        return self.offset + self.limit

    @classmethod
    def from_query_string(cls, params: Optional[Mapping[str, Optional[str]]]) -> 'PaginationRequest':
        """
        Build pagination from API Gateway query string parameters.

        Absent, null and empty values fall back to the defaults.

        Raises:
            pydantic.ValidationError: If a value is not an integer
        """
        raw: Dict[str, Any] = {}
        for name in ('limit', 'offset'):
            value = (params or {}).get(name)
            if value is not None and str(value).strip() != '':
                raw[name] = str(value).strip()
        return cls.model_validate(raw)
