"""
Error taxonomy and classification for the users API.

Every failure the handlers can hit is raised as a ``BaseServiceError``
subclass carrying a stable error code. The classifier maps those codes to
HTTP status codes and safe user-facing messages; the raw exception text is
only ever written to the logs.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from aws_lambda_powertools.metrics import MetricUnit
from pydantic import BaseModel, Field

from users_api.handlers.utils.observability import logger, metrics, tracer
from users_api.models.output import ErrorOutput

INTERNAL_ERROR_MESSAGE = 'Internal server error'


class ErrorSeverity(str, Enum):
    """Error severity levels for classification."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class ErrorCategory(str, Enum):
    """Error categories for classification."""
    VALIDATION = "VALIDATION"
    CONFIGURATION = "CONFIGURATION"
    CREDENTIALS = "CREDENTIALS"
    DATABASE = "DATABASE"
    INFRASTRUCTURE = "INFRASTRUCTURE"


class ErrorContext(BaseModel):
    """Context information for errors."""

    request_id: str = Field(description="Unique request identifier")
    operation: str = Field(description="Operation being performed")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    additional_data: Dict[str, Any] = Field(default_factory=dict)


class BaseServiceError(Exception):
    """Base exception class for service errors."""

    def __init__(
        self,
        message: str,
        error_code: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.INFRASTRUCTURE,
        context: Optional[ErrorContext] = None,
        user_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context
        self.user_message = user_message or INTERNAL_ERROR_MESSAGE
        self.error_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for logging."""
        return {
            "error_id": self.error_id,
            "error_code": self.error_code,
            "message": self.message,
            "user_message": self.user_message,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.model_dump(mode="json") if self.context else None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


class ConfigurationError(BaseServiceError):
    """Raised when required environment settings are missing or invalid."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(
            message=message,
            error_code="CONFIGURATION_ERROR",
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.CONFIGURATION,
            context=context,
            user_message="Server configuration error",
        )


class CredentialsError(BaseServiceError):
    """Raised when database credentials cannot be resolved."""

    def __init__(
        self,
        message: str,
        error_code: str = "CREDENTIALS_ERROR",
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CREDENTIALS,
            context=context,
            user_message="Database credentials error",
        )


class CredentialsNotFoundError(CredentialsError):
    """Raised when the secret store returns no secret payload."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message=message, error_code="CREDENTIALS_NOT_FOUND", context=context)


class InvalidCredentialsFormatError(CredentialsError):
    """Raised when the secret payload lacks a username or password."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message=message, error_code="INVALID_CREDENTIALS_FORMAT", context=context)


class DatabaseConnectionError(BaseServiceError):
    """Raised when a database connection cannot be established."""

    def __init__(
        self,
        message: str,
        error_code: str = "DATABASE_CONNECTION_ERROR",
        user_message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(
            message=message,
            error_code=error_code,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.DATABASE,
            context=context,
            user_message=user_message,
        )


class DatabaseUnavailableError(DatabaseConnectionError):
    """Raised when the database host refuses or cannot be reached."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(
            message=message,
            error_code="DATABASE_UNAVAILABLE",
            user_message="Database connection failed",
            context=context,
        )


class QueryError(BaseServiceError):
    """Raised when a statement fails after the connection was established."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(
            message=message,
            error_code="QUERY_ERROR",
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.DATABASE,
            context=context,
        )


class UnsupportedMethodError(BaseServiceError):
    """Raised for HTTP methods the API does not serve."""

    def __init__(self, method: Optional[str], context: Optional[ErrorContext] = None):
        super().__init__(
            message=f"Unsupported HTTP method: {method}",
            error_code="METHOD_NOT_ALLOWED",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            context=context,
            user_message="Method not allowed",
        )
        self.method = method


class ValidationError(BaseServiceError):
    """Raised when request input cannot be parsed."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            severity=ErrorSeverity.LOW,
            category=ErrorCategory.VALIDATION,
            context=context,
            user_message="Invalid request parameters",
        )


STATUS_MAPPING = {
    "CONFIGURATION_ERROR": 500,
    "CREDENTIALS_ERROR": 500,
    "CREDENTIALS_NOT_FOUND": 500,
    "INVALID_CREDENTIALS_FORMAT": 500,
    "DATABASE_UNAVAILABLE": 503,
    "DATABASE_CONNECTION_ERROR": 500,
    "QUERY_ERROR": 500,
    "METHOD_NOT_ALLOWED": 405,
    "VALIDATION_ERROR": 400,
    "INTERNAL_SERVER_ERROR": 500,
}


def create_error_context(request_id: str, operation: str, **additional_data: Any) -> ErrorContext:
    """Create an error context for consistent error handling."""
    return ErrorContext(
        request_id=request_id,
        operation=operation,
        additional_data=additional_data,
    )


def classify_error(error: Exception, context: Optional[ErrorContext] = None) -> BaseServiceError:
    """Return ``error`` as a service error, wrapping anything uncategorized."""
    if isinstance(error, BaseServiceError):
        if error.context is None:
            error.context = context
        return error

    return BaseServiceError(
        message=f"{type(error).__name__}: {error}",
        error_code="INTERNAL_SERVER_ERROR",
        severity=ErrorSeverity.CRITICAL,
        category=ErrorCategory.INFRASTRUCTURE,
        context=context,
    )


def get_http_status_code(error: BaseServiceError) -> int:
    """Get appropriate HTTP status code for error."""
    return STATUS_MAPPING.get(error.error_code, 500)


@tracer.capture_method
def log_error_metrics(error: BaseServiceError) -> None:
    """Log error metrics for monitoring and alerting."""
    metrics.add_metric(name="ErrorCount", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name=f"Error{error.category.value}Count", unit=MetricUnit.Count, value=1)

    tracer.put_annotation("error_code", error.error_code)
    tracer.put_annotation("error_category", error.category.value)

    logger.error(
        "Service error occurred",
        extra={
            "error_id": error.error_id,
            "error_code": error.error_code,
            "error_severity": error.severity.value,
            "error_category": error.category.value,
            "error_message": error.message,
            "context": error.context.model_dump(mode="json") if error.context else None,
        },
    )


def format_error_response(error: BaseServiceError) -> Dict[str, Any]:
    """Format error for API response. Only the safe message and code are exposed."""
    return ErrorOutput(message=error.user_message, error_type=error.error_code).model_dump(by_alias=True)


def create_api_response(
    status_code: int,
    body: str,
    headers: Optional[Dict[str, str]] = None,
    request_id: Optional[str] = None,
    allow_origin: str = "*",
) -> Dict[str, Any]:
    """Create standardized API Gateway response."""
    default_headers = {
        "Content-Type": "application/json",
        "X-Request-ID": request_id or str(uuid.uuid4()),
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
        "Access-Control-Allow-Methods": "OPTIONS,POST,GET",
    }

    if headers:
        default_headers.update(headers)

    return {
        "statusCode": status_code,
        "headers": default_headers,
        "body": body,
    }
