"""Generate-once credential provisioning for GitLab deployments."""

import logging
import os
import re
import stat
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from ..utils.errors import (
    MissingKeyError,
    PermissionFailedError,
    PersistFailedError,
    SecretsError,
    SecretsFileNotFoundError,
    create_error_suggestions,
)
from .generator import SecretGenerator

logger = logging.getLogger(__name__)

SECRETS_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR  # 600

SECRETS_FILE_HEADER = "# GitLab deployment credentials (generated by gitlabkit, do not edit)"

_ASSIGNMENT = re.compile(r"^(?:export\s+)?([A-Za-z_][A-Za-z0-9_]*)=(.*)$")


@dataclass(frozen=True)
class SecretBundle:
    """Credentials substituted into the generated deployment files."""

    db_password: str = field(repr=False)
    minio_password: str = field(repr=False)
    smtp_password: str = field(repr=False)

    KEYS = {
        "DB_PASSWORD": "db_password",
        "MINIO_PASSWORD": "minio_password",
        "SMTP_PASSWORD": "smtp_password",
    }

    @classmethod
    def from_mapping(cls, values: Mapping[str, str], path: str = "<memory>") -> "SecretBundle":
        """
        Build a bundle from persisted variable names.

        Args:
            values: Mapping of variable name to value
            path: Source path, used in error messages

        Raises:
            MissingKeyError: If a required key is absent or empty
        """
        kwargs = {}
        for key, attribute in cls.KEYS.items():
            value = values.get(key)
            if not value:
                raise MissingKeyError(key, path)
            kwargs[attribute] = value
        return cls(**kwargs)

    def as_env(self) -> Dict[str, str]:
        """Return the bundle keyed by persisted variable name."""
        return {key: getattr(self, attribute) for key, attribute in self.KEYS.items()}

    def masked(self) -> Dict[str, str]:
        """Return the bundle with every value reduced to a two-character prefix."""
        return {key: value[:2] + "*" * (len(value) - 2) for key, value in self.as_env().items()}


def parse_secrets_file(content: str) -> Dict[str, str]:
    """
    Parse ``KEY='value'`` assignments.

    Comments, blank lines and lines without an assignment are skipped. Values
    may be single-quoted, double-quoted or bare.

    Args:
        content: File contents

    Returns:
        Dict[str, str]: Parsed assignments
    """
    values = {}
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        match = _ASSIGNMENT.match(line)
        if not match:
            continue

        key, value = match.group(1), match.group(2).strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
            value = value[1:-1]
        values[key] = value

    return values


def format_secrets_file(bundle: SecretBundle) -> str:
    """Render a bundle in the persisted ``KEY='value'`` format."""
    lines = [SECRETS_FILE_HEADER]
    for key, value in bundle.as_env().items():
        lines.append(f"{key}='{value}'")
    return "\n".join(lines) + "\n"


class SecretManager:
    """Loads or creates the secrets file backing a deployment."""

    def __init__(self, generator: Optional[SecretGenerator] = None, verbose: bool = False):
        """
        Initialize secret manager.

        Args:
            generator: Secret generator, a default one is created if omitted
            verbose: Enable verbose output
        """
        self.verbose = verbose
        self.generator = generator or SecretGenerator(verbose=verbose)

    def provision(self, path: str) -> Tuple[SecretBundle, bool]:
        """
        Load the bundle at ``path`` or generate and persist a new one.

        Args:
            path: Secrets file location

        Returns:
            Tuple[SecretBundle, bool]: The bundle and whether it was just created
        """
        if os.path.exists(path):
            logger.info("Found existing secrets file %s, reusing credentials", path)
            return self.load_secrets(path), False

        logger.info("Generating credentials into %s", path)
        bundle = SecretBundle.from_mapping(self.generator.generate_deployment_secrets())
        self.save_secrets(bundle, path)
        return bundle, True

    def ensure_secrets(self, path: str) -> SecretBundle:
        """Return the bundle at ``path``, creating it on first use."""
        bundle, _ = self.provision(path)
        return bundle

    def load_secrets(self, path: str) -> SecretBundle:
        """
        Load an existing secrets file.

        Args:
            path: Secrets file location

        Returns:
            SecretBundle: Parsed credentials
        """
        try:
            with open(path, encoding="utf-8") as f:
                content = f.read()
        except FileNotFoundError:
            raise SecretsFileNotFoundError(
                f"Secrets file not found: {path}",
                suggestions=create_error_suggestions("secrets_missing"),
            )
        except OSError as e:
            raise SecretsError(f"Cannot read secrets file {path}", details=str(e))

        return SecretBundle.from_mapping(parse_secrets_file(content), path)

    def save_secrets(self, bundle: SecretBundle, path: str) -> str:
        """
        Persist a bundle with owner-only permissions.

        The content goes to a temporary file next to ``path`` that is renamed
        into place, so readers never observe a partial file.

        Args:
            bundle: Credentials to persist
            path: Secrets file location

        Returns:
            str: Path to the secrets file
        """
        directory = os.path.dirname(os.path.abspath(path))

        try:
            Path(directory).mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(prefix=".secrets-", suffix=".tmp", dir=directory)
        except OSError as e:
            raise PersistFailedError(f"Failed to write secrets file {path}", details=str(e))

        try:
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(format_secrets_file(bundle))
                    f.flush()
                    os.fsync(f.fileno())
            except OSError as e:
                raise PersistFailedError(f"Failed to write secrets file {path}", details=str(e))

            try:
                os.chmod(tmp_path, SECRETS_FILE_MODE)
            except OSError as e:
                raise PermissionFailedError(f"Failed to restrict permissions of {path}", details=str(e))

            try:
                os.replace(tmp_path, path)
            except OSError as e:
                raise PersistFailedError(f"Failed to write secrets file {path}", details=str(e))
        except SecretsError:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

        logger.info("Saved credentials to %s (mode 600)", path)

        return path

    def check_permissions(self, path: str) -> bool:
        """
        Check that only the owner can access the secrets file.

        Args:
            path: Secrets file location

        Returns:
            bool: True if group and other have no access
        """
        mode = os.stat(path).st_mode
        return not mode & (stat.S_IRWXG | stat.S_IRWXO)


def ensure_secrets(path: str) -> SecretBundle:
    """
    Load the secrets file at ``path`` or create it on first use.

    Args:
        path: Secrets file location

    Returns:
        SecretBundle: Credentials for the deployment
    """
    return SecretManager().ensure_secrets(path)
