"""Credential provisioning for GitLab deployments."""

from .generator import SecretGenerator
from .manager import SecretBundle, SecretManager, ensure_secrets

__all__ = [
    "SecretGenerator",
    "SecretManager",
    "SecretBundle",
    "ensure_secrets",
]
