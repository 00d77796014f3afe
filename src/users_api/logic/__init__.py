"""
Business Logic Layer Module.

Holds the users schema definition and its idempotent initialization.
"""

from users_api.logic.schema import build_schema_statements, initialize_schema

__all__ = [
    "build_schema_statements",
    "initialize_schema",
]
