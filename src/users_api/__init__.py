"""
Users API service.

Two AWS Lambda functions share this package:

- handlers.users_handler: API Gateway entry point listing users from PostgreSQL
- handlers.schema_init_handler: CloudFormation custom resource creating the schema

Layers follow the usual handler/logic/dal split:

- handlers: Lambda entry points, environment models, error handling, observability
- logic: schema definition and initialization
- dal: connection management and queries
- security: database credential resolution
- models: request, response and domain models
"""

__version__ = "1.0.0"
__description__ = "Serverless users API backed by PostgreSQL"

from users_api.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
