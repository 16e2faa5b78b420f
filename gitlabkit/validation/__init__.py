"""Pre-flight validation for GitLab deployments."""

from .dependencies import DependencyChecker

__all__ = ["DependencyChecker"]
