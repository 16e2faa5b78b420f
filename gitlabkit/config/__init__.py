"""Configuration management for gitlabkit."""

from .manager import ConfigManager
from .schemas import CONFIG_SCHEMA
from .settings import DeploymentSettings

__all__ = ['ConfigManager', 'CONFIG_SCHEMA', 'DeploymentSettings']
