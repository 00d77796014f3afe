"""
Schema Initializer - CloudFormation custom resource handler.

Creates the users schema when the stack is created or updated and does
nothing on delete, leaving data in place. The provider waiting on this
function needs exactly one response per event, so every failure is turned
into a FAILED response instead of being raised.
"""

from typing import Any, Dict

from aws_lambda_powertools.metrics import MetricUnit
from aws_lambda_powertools.utilities.typing import LambdaContext

from users_api.dal.db_connection import ConnectionConfig, open_connection
from users_api.handlers.models.env_vars import SchemaInitEnvVars, get_env_vars
from users_api.handlers.utils.observability import logger, metrics, tracer
from users_api.logic.schema import initialize_schema
from users_api.models.custom_resource import (
    CustomResourceEvent,
    CustomResourceResponse,
    RequestType,
    ResponseStatus,
)
from users_api.security.secrets_manager import SecretsManagerCredentialResolver

SUCCESS_REASON = 'Database initialization completed successfully'
DELETE_REASON = 'Delete requested; database left unchanged'
FAILURE_REASON_PREFIX = 'Database initialization failed'


def build_response(event: Dict[str, Any], status: ResponseStatus, reason: str) -> Dict[str, Any]:
    """Echo the event identifiers from the raw event so a malformed event still gets an answer."""
    return CustomResourceResponse(
        request_id=str(event.get('RequestId') or ''),
        logical_resource_id=str(event.get('LogicalResourceId') or ''),
        stack_id=str(event.get('StackId') or ''),
        status=status,
        reason=reason,
    ).to_dict()


@tracer.capture_method
def handle_lifecycle_event(event: Dict[str, Any]) -> str:
    """
    Apply one lifecycle event to the database.

    Args:
        event: Custom resource event

    Returns:
        Reason reported back to CloudFormation

    Raises:
        Exception: Any failure; the caller reports it as FAILED
    """
    lifecycle_event = CustomResourceEvent.model_validate(event)
    tracer.put_annotation("request_type", lifecycle_event.request_type.value)

    if lifecycle_event.request_type == RequestType.DELETE:
        logger.info("Delete event received, skipping database initialization")
        return DELETE_REASON

    env_vars = get_env_vars(SchemaInitEnvVars)
    config = ConnectionConfig.from_env_vars(env_vars)
    credentials = SecretsManagerCredentialResolver().resolve(env_vars.DB_SECRET_ARN)

    # Sample rows only go in once, when the stack is first created
    seed = env_vars.seed_sample_data and lifecycle_event.request_type == RequestType.CREATE

    with open_connection(config, credentials) as connection:
        initialize_schema(
            connection,
            enable_row_level_security=env_vars.row_level_security_enabled,
            seed_sample_data=seed,
        )

    return SUCCESS_REASON


@metrics.log_metrics(capture_cold_start_metric=True)
@tracer.capture_lambda_handler
@logger.inject_lambda_context
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """
    Main Lambda handler function.

    Args:
        event: CloudFormation custom resource event
        context: Lambda context object

    Returns:
        Custom resource response; never raises
    """
    logger.append_keys(
        request_type=event.get('RequestType'),
        logical_resource_id=event.get('LogicalResourceId'),
    )
    logger.info("Custom resource event received", extra={"stack_id": event.get('StackId')})

    try:
        reason = handle_lifecycle_event(event)
    except Exception as e:
        logger.exception("Database initialization failed")
        metrics.add_metric(name="SchemaInitFailure", unit=MetricUnit.Count, value=1)
        return build_response(event, ResponseStatus.FAILED, f"{FAILURE_REASON_PREFIX}: {e}")

    metrics.add_metric(name="SchemaInitSuccess", unit=MetricUnit.Count, value=1)
    logger.info("Custom resource event handled", extra={"reason": reason})
    return build_response(event, ResponseStatus.SUCCESS, reason)
