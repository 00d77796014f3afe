"""
CloudFormation custom resource event and response models.

The schema initializer runs behind a custom resource provider, which blocks
stack operations until it receives exactly one response per lifecycle event.
"""

from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field

PHYSICAL_RESOURCE_ID = 'DBInitialization'


class RequestType(str, Enum):
    """Lifecycle event request types."""

    CREATE = 'Create'
    UPDATE = 'Update'
    DELETE = 'Delete'


class ResponseStatus(str, Enum):
    """Custom resource response statuses."""

    SUCCESS = 'SUCCESS'
    FAILED = 'FAILED'


class CustomResourceEvent(BaseModel):
    """Subset of the custom resource event the initializer reads."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    request_type: Annotated[RequestType, Field(alias='RequestType')]
    stack_id: Annotated[str, Field(alias='StackId')]
    request_id: Annotated[str, Field(alias='RequestId')]
    logical_resource_id: Annotated[str, Field(alias='LogicalResourceId')]
    resource_type: Annotated[Optional[str], Field(default=None, alias='ResourceType')] = None
    resource_properties: Annotated[dict[str, Any], Field(default_factory=dict, alias='ResourceProperties')]


class CustomResourceResponse(BaseModel):
    """Response echoing the event identifiers with the outcome."""

    model_config = ConfigDict(populate_by_name=True)

    request_id: Annotated[str, Field(alias='RequestId')]
    logical_resource_id: Annotated[str, Field(alias='LogicalResourceId')]
    physical_resource_id: Annotated[str, Field(
        default=PHYSICAL_RESOURCE_ID,
        alias='PhysicalResourceId'
    )] = PHYSICAL_RESOURCE_ID
    stack_id: Annotated[str, Field(alias='StackId')]
    status: Annotated[ResponseStatus, Field(alias='Status')]
    reason: Annotated[str, Field(alias='Reason')]
    no_echo: Annotated[bool, Field(default=False, alias='NoEcho')] = False

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)
