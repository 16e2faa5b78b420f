"""Reverse proxy configuration for GitLab deployments."""

from .nginx import NginxConfigGenerator

__all__ = ["NginxConfigGenerator"]
