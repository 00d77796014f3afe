"""
AWS Lambda Handlers Module.

Entry points:

- users_handler.lambda_handler: API Gateway proxy requests for /users
- schema_init_handler.lambda_handler: CloudFormation custom resource events

Handlers are not imported here so that loading one function does not pull in
the other's dependencies.
"""

from users_api.handlers.utils.observability import logger, metrics, tracer

__all__ = [
    "logger",
    "tracer",
    "metrics",
]
