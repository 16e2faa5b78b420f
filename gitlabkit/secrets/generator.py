"""Secure secret generation for GitLab deployments."""

import base64
import secrets
import string
from typing import Dict

from ..utils.errors import EntropyUnavailableError, SecurityError

# Standard base64 alphabet without padding. Values are substituted inside
# single-quoted YAML and Ruby strings, so neither quote nor backslash may occur.
BASE64_ALPHABET = frozenset(string.ascii_letters + string.digits + "+/")
FORBIDDEN_CHARACTERS = frozenset("'\"\\")

# Persisted variable name -> generated length
SECRET_LENGTHS = {
    "DB_PASSWORD": 32,
    "MINIO_PASSWORD": 32,
    "SMTP_PASSWORD": 24,
}


class SecretGenerator:
    """Generates cryptographically secure secrets for GitLab deployments."""

    def __init__(self, verbose: bool = False):
        """Initialize secret generator."""
        self.verbose = verbose

    def generate_password(self, length: int = 32) -> str:
        """
        Generate a base64-derived password.

        The password is the first ``length`` characters of the base64 encoding
        of ``length`` random bytes, which leaves no room for padding.

        Args:
            length: Password length

        Returns:
            str: Secure password
        """
        if length < 8:
            raise SecurityError("Password length must be at least 8 characters")

        try:
            raw = secrets.token_bytes(length)
        except (OSError, NotImplementedError) as e:
            raise EntropyUnavailableError(
                "System random source is unavailable",
                details=str(e),
            )

        password = base64.b64encode(raw).decode("ascii")[:length]
        self.validate_secret(password, length)
        return password

    def validate_secret(self, secret: str, length: int) -> None:
        """
        Check a secret against the base64 alphabet and expected length.

        Args:
            secret: Value to check
            length: Required length

        Raises:
            SecurityError: If the value is unsafe for quoted substitution
        """
        if len(secret) != length:
            raise SecurityError(f"Generated secret has length {len(secret)}, expected {length}")

        unexpected = set(secret) - BASE64_ALPHABET
        if unexpected or FORBIDDEN_CHARACTERS & set(secret):
            raise SecurityError(
                "Generated secret contains characters outside the base64 alphabet",
                details=f"Offending characters: {''.join(sorted(unexpected))!r}",
            )

    def generate_deployment_secrets(self) -> Dict[str, str]:
        """
        Generate the GitLab credential set.

        Returns:
            Dict[str, str]: Secrets keyed by their persisted variable name
        """
        secrets_dict = {name: self.generate_password(length) for name, length in SECRET_LENGTHS.items()}

        if self.verbose:
            print(f"Generated {len(secrets_dict)} deployment secrets")

        return secrets_dict
