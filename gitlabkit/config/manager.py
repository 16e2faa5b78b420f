"""Configuration management for gitlabkit."""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from ..utils.errors import ConfigurationError, create_error_suggestions
from .settings import DEFAULT_GITLAB_DIR, SECRETS_FILENAME, DeploymentSettings
from .validator import ConfigValidationError, ConfigValidator

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "gitlabkit.yml"

# Environment variable -> (section, key)
ENV_OVERRIDES = {
    "GITLABKIT_DIR": ("deployment", "gitlab_dir"),
    "GITLABKIT_DOMAIN": ("deployment", "domain"),
    "GITLABKIT_BASE_DOMAIN": ("deployment", "base_domain"),
    "GITLABKIT_SECRETS_FILE": ("deployment", "secrets_file"),
    "GITLABKIT_OWNER": ("deployment", "owner"),
}

# (section, key) -> DeploymentSettings field
SETTINGS_FIELDS = {
    ("deployment", "gitlab_dir"): "gitlab_dir",
    ("deployment", "domain"): "domain",
    ("deployment", "base_domain"): "base_domain",
    ("deployment", "intranet_hostname"): "intranet_hostname",
    ("deployment", "secrets_file"): "secrets_file",
    ("deployment", "owner"): "owner",
    ("acme", "dns_provider"): "acme_dns_provider",
    ("acme", "server"): "acme_server",
    ("acme", "renew_schedule"): "renew_schedule",
}


class ConfigManager:
    """Loads deployment configuration from file, environment and CLI overrides."""

    def __init__(self, path: Optional[str] = None, config_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            path: Directory searched for gitlabkit.yml (defaults to current directory)
            config_file: Explicit configuration file, must exist when given
        """
        self.path = path or os.getcwd()
        self.config_file = config_file
        self.validator = ConfigValidator()
        self._config_cache = None

    def get_config_path(self) -> Optional[str]:
        """Get path to the configuration file, if any."""
        if self.config_file:
            return self.config_file

        candidate = os.path.join(self.path, CONFIG_FILENAME)
        if os.path.exists(candidate):
            return candidate

        return None

    def load_config(self, validate: bool = True) -> Dict[str, Any]:
        """
        Load the configuration file merged with environment overrides.

        Args:
            validate: Whether to validate the configuration

        Returns:
            Dict[str, Any]: Loaded configuration

        Raises:
            ConfigValidationError: If validation fails
            ConfigurationError: If the file is unreadable or not valid YAML
        """
        if self._config_cache is not None:
            return self._config_cache

        config: Dict[str, Any] = {}
        config_path = self.get_config_path()

        if config_path:
            try:
                with open(config_path, encoding="utf-8") as f:
                    config = yaml.safe_load(f) or {}
            except FileNotFoundError:
                raise ConfigurationError(f"Configuration file not found: {config_path}")
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Error parsing YAML file {config_path}",
                    details=str(e),
                    suggestions=create_error_suggestions("configuration_invalid"),
                )
            if not isinstance(config, dict):
                raise ConfigValidationError(["Configuration file must contain a mapping"])
            logger.debug("Loaded configuration from %s", config_path)

        config = self.apply_environment(config)

        if validate:
            errors = self.validator.validate_config(config)
            if errors:
                raise ConfigValidationError(errors)

        self._config_cache = config
        return config

    def apply_environment(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Overlay GITLABKIT_* environment variables onto a configuration.

        Args:
            config: Configuration loaded from file

        Returns:
            Dict[str, Any]: New configuration with overrides applied
        """
        merged = {section: dict(values) for section, values in config.items() if isinstance(values, dict)}
        merged.update({key: value for key, value in config.items() if not isinstance(value, dict)})

        for variable, (section, key) in ENV_OVERRIDES.items():
            value = os.environ.get(variable)
            if value:
                merged.setdefault(section, {})[key] = value
                logger.debug("Using %s from environment", variable)

        return merged

    def configured_domain(self) -> Optional[str]:
        """Return the domain from file or environment, if any."""
        deployment = self.load_config().get("deployment") or {}
        return deployment.get("domain")

    def resolve_secrets_file(self, override: Optional[str] = None) -> str:
        """
        Locate the secrets file without requiring a domain.

        Args:
            override: Explicit path, takes precedence over configuration

        Returns:
            str: Absolute path to the secrets file
        """
        if override:
            return os.path.abspath(os.path.expanduser(override))

        deployment = self.load_config().get("deployment") or {}
        if deployment.get("secrets_file"):
            return os.path.abspath(os.path.expanduser(deployment["secrets_file"]))

        gitlab_dir = deployment.get("gitlab_dir") or DEFAULT_GITLAB_DIR
        return os.path.join(os.path.abspath(os.path.expanduser(gitlab_dir)), SECRETS_FILENAME)

    def apply_overrides(self, config: Dict[str, Any], overrides: Dict[str, Optional[str]]) -> Dict[str, Any]:
        """
        Overlay CLI overrides onto a configuration.

        Args:
            config: Configuration after file and environment
            overrides: DeploymentSettings fields; None values are ignored

        Returns:
            Dict[str, Any]: New configuration with overrides applied
        """
        merged = {section: dict(values) for section, values in config.items() if isinstance(values, dict)}
        merged.update({key: value for key, value in config.items() if not isinstance(value, dict)})

        sections = {field_name: location for location, field_name in SETTINGS_FIELDS.items()}
        for name, value in overrides.items():
            if value is None:
                continue
            if name not in sections:
                raise ConfigurationError(f"Unknown deployment setting: {name}")
            section, key = sections[name]
            merged.setdefault(section, {})[key] = value

        return merged

    def build_settings(self, **overrides: Optional[str]) -> DeploymentSettings:
        """
        Build deployment settings from configuration and CLI overrides.

        Overrides are validated against the same schema as the file, so a
        domain passed on the command line gets the same checks.

        Args:
            **overrides: DeploymentSettings fields; None values are ignored

        Returns:
            DeploymentSettings: Resolved settings

        Raises:
            ConfigValidationError: If the merged configuration is invalid
            ConfigurationError: If no domain is configured
        """
        config = self.apply_overrides(self.load_config(), overrides)

        errors = self.validator.validate_config(config)
        if errors:
            raise ConfigValidationError(errors)

        values = {}
        for (section, key), field_name in SETTINGS_FIELDS.items():
            section_config = config.get(section) or {}
            if section_config.get(key) is not None:
                values[field_name] = section_config[key]

        if not values.get("domain"):
            raise ConfigurationError(
                "No GitLab domain configured",
                suggestions=[
                    "Pass --domain gitlab.example.com",
                    f"Set deployment.domain in {CONFIG_FILENAME}",
                    "Export GITLABKIT_DOMAIN",
                ],
            )

        return DeploymentSettings(**values)
