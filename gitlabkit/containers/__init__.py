"""Container manifests for GitLab deployments."""

from .compose import ComposeManifestGenerator

__all__ = ["ComposeManifestGenerator"]
