"""
Shared observability instances for the users API and the schema initializer.

Both Lambda functions log, trace and emit metrics through the same AWS Lambda
Powertools objects so correlation ids and namespaces stay consistent.
"""

from aws_lambda_powertools.logging import Logger
from aws_lambda_powertools.metrics import Metrics
from aws_lambda_powertools.tracing import Tracer

METRICS_NAMESPACE = 'UsersApi'

# Service name comes from POWERTOOLS_SERVICE_NAME, level from LOG_LEVEL
logger: Logger = Logger()

# Disabled outside Lambda or when POWERTOOLS_TRACE_DISABLED is "true"
tracer: Tracer = Tracer()

# POWERTOOLS_METRICS_NAMESPACE overrides the namespace below
metrics = Metrics(namespace=METRICS_NAMESPACE)
