"""Docker Compose manifest generation for GitLab deployments."""

import logging
from typing import Any, Dict

import yaml

from ..config.settings import DeploymentSettings
from ..secrets.manager import SecretBundle
from ..templates import render_template
from ..utils.errors import TemplateError
from ..utils.files import FileManager

logger = logging.getLogger(__name__)

MINIO_USER = "minioadmin"

MINIO_BUCKETS = [
    "gitlab-lfs",
    "gitlab-uploads",
    "gitlab-artifacts",
    "gitlab-packages",
    "gitlab-registry",
    "gitlab-dependency-proxy",
    "gitlab-terraform-state",
    "gitlab-pages",
]

OBJECT_STORE_KINDS = [
    "artifacts",
    "uploads",
    "lfs",
    "packages",
    "dependency_proxy",
    "terraform_state",
    "ci_secure_files",
]

EXPECTED_SERVICES = [
    "postgresql",
    "redis",
    "minio",
    "postfix",
    "gitlab",
    "gitlab-runner",
    "minio-init",
    "nginx",
]


class ComposeManifestGenerator:
    """Renders the docker-compose.yml that runs GitLab and its backing services."""

    def __init__(self, verbose: bool = False):
        """Initialize compose manifest generator."""
        self.verbose = verbose
        self.file_manager = FileManager(verbose=verbose)
        self.network_name = "gitlab-net"

    def render(self, settings: DeploymentSettings, secrets: SecretBundle) -> str:
        """
        Render the compose manifest.

        Args:
            settings: Deployment settings
            secrets: Credentials substituted into the manifest

        Returns:
            str: Manifest text
        """
        content = render_template(
            "docker-compose.yml.j2",
            settings=settings,
            secrets=secrets,
            network=self.network_name,
            minio_user=MINIO_USER,
            buckets=MINIO_BUCKETS,
            object_store_kinds=OBJECT_STORE_KINDS,
        )
        self.validate(content)
        return content

    def validate(self, content: str) -> Dict[str, Any]:
        """
        Parse a rendered manifest and check its top-level structure.

        Args:
            content: Manifest text

        Returns:
            Dict[str, Any]: Parsed manifest

        Raises:
            TemplateError: If the manifest is not valid YAML or lacks services
        """
        try:
            manifest = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise TemplateError("Rendered docker-compose.yml is not valid YAML", details=str(e))

        if not isinstance(manifest, dict) or not isinstance(manifest.get("services"), dict):
            raise TemplateError("Rendered docker-compose.yml has no services section")

        missing = [name for name in EXPECTED_SERVICES if name not in manifest["services"]]
        if missing:
            raise TemplateError(f"Rendered docker-compose.yml is missing services: {', '.join(missing)}")

        return manifest

    def generate_compose_file(self, settings: DeploymentSettings, secrets: SecretBundle) -> str:
        """
        Render and write docker-compose.yml into the deployment directory.

        Args:
            settings: Deployment settings
            secrets: Credentials substituted into the manifest

        Returns:
            str: Path to generated compose file
        """
        content = self.render(settings, secrets)
        path = self.file_manager.write_file(settings.compose_file, content)

        logger.info("Generated Docker Compose file: %s", path)
        if self.verbose:
            print(f"Services included: {', '.join(EXPECTED_SERVICES)}")

        return path
