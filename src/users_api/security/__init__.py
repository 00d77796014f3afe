"""
Security Module.

Resolves database credentials from AWS Secrets Manager.
"""

from .secrets_manager import SecretsManagerCredentialResolver

__all__ = [
    'SecretsManagerCredentialResolver',
]
