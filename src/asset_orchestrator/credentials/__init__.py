"""Credential provisioning for generation requests."""

from .credential_gate import CredentialContext, CredentialGate
from .credential_providers import (
    CredentialProvider,
    EnvironmentCredentialProvider,
    StaticCredentialProvider,
)

__all__ = [
    "CredentialContext",
    "CredentialGate",
    "CredentialProvider",
    "EnvironmentCredentialProvider",
    "StaticCredentialProvider",
]
