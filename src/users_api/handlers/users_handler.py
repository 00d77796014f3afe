"""
Users Handler - Lambda function behind the API Gateway users route.

Dispatches on the HTTP method:

- GET: reads one page of users from PostgreSQL
- POST: echoes the JSON body back, no persistence
- anything else: 405 without touching Secrets Manager or the database

Every failure goes through the error classifier, which returns a safe message
and an error-kind label while the full detail goes to the logs.
"""

import base64
import binascii
import json
from typing import Any, Dict, Optional, Union

from aws_lambda_powertools.logging import correlation_paths
from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError as PydanticValidationError

from users_api.dal.db_connection import ConnectionConfig, open_connection
from users_api.dal.users_dal import UsersDal
from users_api.handlers.models.env_vars import ApiEnvVars, DatabaseEnvVars, get_env_vars
from users_api.handlers.utils.error_handling import (
    BaseServiceError,
    UnsupportedMethodError,
    ValidationError,
    classify_error,
    create_api_response,
    create_error_context,
    format_error_response,
    get_http_status_code,
    log_error_metrics,
)
from users_api.handlers.utils.observability import logger, metrics, tracer
from users_api.models.input import PaginationRequest
from users_api.models.output import EchoOutput, ListUsersOutput, PaginationOutput
from users_api.security.secrets_manager import SecretsManagerCredentialResolver

ALLOWED_METHODS = ('GET', 'POST')


def get_http_method(event: Dict[str, Any]) -> Optional[str]:
    """Read the method from a REST (v1) or HTTP API (v2) proxy event."""
    method = event.get('httpMethod')
    if not method:
        method = ((event.get('requestContext') or {}).get('http') or {}).get('method')
    return method.upper() if method else None


def parse_pagination(event: Dict[str, Any]) -> PaginationRequest:
    """
    Normalize the pagination query parameters.

    Raises:
        ValidationError: If limit or offset is not an integer
    """
    try:
        return PaginationRequest.from_query_string(event.get('queryStringParameters'))
    except PydanticValidationError as e:
        invalid_fields = [str(error['loc'][-1]) for error in e.errors() if error['loc']]
        raise ValidationError(f"Invalid pagination parameters: {invalid_fields}") from e


def parse_body(event: Dict[str, Any]) -> Any:
    """
    Parse the request body as JSON. Absent, empty and ``null`` bodies become ``{}``.

    Direct invocations may pass an already parsed object or array, which is
    returned as is.

    Raises:
        ValidationError: If the body is not valid JSON
    """
    body = event.get('body')
    if body is None:
        return {}
    if isinstance(body, (dict, list)):
        return body
    if not isinstance(body, str):
        raise ValidationError(f"Unsupported request body type: {type(body).__name__}")

    try:
        if event.get('isBase64Encoded'):
            body = base64.b64decode(body).decode('utf-8')
        if not body.strip():
            return {}
        parsed = json.loads(body)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValidationError(f"Invalid JSON in request body: {e}") from e

    return {} if parsed is None else parsed


@tracer.capture_method
def list_users(event: Dict[str, Any]) -> ListUsersOutput:
    """Resolve credentials, open a connection and read one page of users."""
    pagination = parse_pagination(event)
    tracer.put_annotation("limit", pagination.limit)
    tracer.put_annotation("offset", pagination.offset)

    env_vars = get_env_vars(DatabaseEnvVars)
    config = ConnectionConfig.from_env_vars(env_vars)

    credentials = SecretsManagerCredentialResolver().resolve(env_vars.DB_SECRET_ARN)

    with open_connection(config, credentials) as connection:
        rows = UsersDal(connection).list_users(limit=pagination.limit, offset=pagination.offset)

    metrics.add_metric(name="UsersReturned", unit=MetricUnit.Count, value=len(rows))

    return ListUsersOutput(
        data=rows,
        pagination=PaginationOutput(
            limit=pagination.limit,
            offset=pagination.offset,
            next_offset=pagination.next_offset,
        ),
    )


@tracer.capture_method
def echo_body(event: Dict[str, Any]) -> EchoOutput:
    """Echo the parsed request body."""
    body = parse_body(event)
    logger.info("POST request received", extra={"body_type": type(body).__name__})
    return EchoOutput(body=body)


def dispatch(event: Dict[str, Any]) -> Union[ListUsersOutput, EchoOutput]:
    """Route the request on its HTTP method."""
    method = get_http_method(event)

    if method == 'GET':
        return list_users(event)
    if method == 'POST':
        return echo_body(event)

    raise UnsupportedMethodError(method)


@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@logger.inject_lambda_context(correlation_id_path=correlation_paths.API_GATEWAY_REST)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        API Gateway response
    """
    api_env_vars = get_env_vars(ApiEnvVars)
    request_id = context.aws_request_id
    method = get_http_method(event)

    tracer.put_annotation("http_method", method or "UNKNOWN")
    metrics.add_metric(name="RequestCount", unit=MetricUnit.Count, value=1)

    logger.info(
        "Users request received",
        extra={
            "http_method": method,
            "path": event.get("path"),
            "query_parameters": event.get("queryStringParameters"),
        },
    )

    try:
        output = dispatch(event)
    except Exception as e:
        error = classify_error(
            e,
            create_error_context(request_id=request_id, operation=f"{method or 'UNKNOWN'} /users"),
        )
        if not isinstance(e, BaseServiceError):
            logger.exception("Unexpected error in users handler", extra={"error_id": error.error_id})
        log_error_metrics(error)

        status_code = get_http_status_code(error)
        headers = None
        if isinstance(error, UnsupportedMethodError):
            metrics.add_metric(name="MethodNotAllowed", unit=MetricUnit.Count, value=1)
            headers = {"Allow": ", ".join(ALLOWED_METHODS)}

        return create_api_response(
            status_code=status_code,
            body=json.dumps(format_error_response(error)),
            headers=headers,
            request_id=request_id,
            allow_origin=api_env_vars.CORS_ALLOW_ORIGIN,
        )

    metrics.add_metric(name="SuccessCount", unit=MetricUnit.Count, value=1)
    logger.info("Users request completed successfully", extra={"http_method": method})

    return create_api_response(
        status_code=200,
        body=output.model_dump_json(by_alias=True),
        request_id=request_id,
        allow_origin=api_env_vars.CORS_ALLOW_ORIGIN,
    )
