"""
Database credential model parsed from the Secrets Manager payload.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


class DatabaseCredentials(BaseModel):
    """Username and password for the database. Lives only for one invocation."""

    model_config = ConfigDict(frozen=True, extra='ignore')

    username: Annotated[str, Field(
        strict=True,
        description='Database user name'
    )]

    password: Annotated[SecretStr, Field(
        description='Database password, masked in logs and reprs'
    )]

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('username must not be empty')
        return v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value():
            raise ValueError('password must not be empty')
        return v
