"""Configuration validation for gitlabkit."""

from typing import Any, Dict, List

import jsonschema

from ..utils.errors import ConfigurationError, create_error_suggestions, format_validation_errors
from .schemas import CONFIG_SCHEMA


class ConfigValidationError(ConfigurationError):
    """Raised when configuration validation fails."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(
            "Configuration validation failed",
            details=format_validation_errors(errors),
            suggestions=create_error_suggestions("configuration_invalid"),
        )


class ConfigValidator:
    """Validates gitlabkit configuration files."""

    def validate_config(self, config: Dict[str, Any]) -> List[str]:
        """
        Validate a deployment configuration.

        Args:
            config: Configuration dictionary to validate

        Returns:
            List[str]: List of validation errors (empty if valid)
        """
        errors = []

        validator = jsonschema.Draft7Validator(CONFIG_SCHEMA)
        for error in sorted(validator.iter_errors(config), key=lambda e: list(e.path)):
            location = ".".join(str(part) for part in error.path)
            if location:
                errors.append(f"{location}: {error.message}")
            else:
                errors.append(error.message)

        deployment = config.get("deployment") if isinstance(config, dict) else None
        if isinstance(deployment, dict):
            domain = deployment.get("domain")
            base_domain = deployment.get("base_domain")
            if isinstance(domain, str) and isinstance(base_domain, str):
                errors.extend(self._validate_base_domain(domain, base_domain))

        return errors

    def _validate_base_domain(self, domain: str, base_domain: str) -> List[str]:
        """Validate that the certificate domain covers the GitLab host."""
        errors = []

        if domain != base_domain and not domain.endswith("." + base_domain):
            errors.append(f"deployment.domain {domain} is not inside base_domain {base_domain}")

        return errors
