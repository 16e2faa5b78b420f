"""GitLab deployment generation."""

import logging
import os
from typing import Any, Dict, List, Optional

from gitlabkit.config.settings import DeploymentSettings
from gitlabkit.containers.compose import ComposeManifestGenerator
from gitlabkit.proxy.nginx import NginxConfigGenerator
from gitlabkit.secrets import SecretBundle, SecretManager
from gitlabkit.ssl.acme import AcmeRenewalScript
from gitlabkit.utils.errors import TemplateError
from gitlabkit.utils.files import FileManager
from gitlabkit.validation.dependencies import DependencyChecker

logger = logging.getLogger(__name__)

# Bind-mount targets of the compose services
DIRECTORY_LAYOUT = {
    "nginx": {"ssl": {}},
    "postgres": {"data": {}},
    "redis": {"data": {}},
    "minio": {"data": {}},
    "gitlab": {"config": {}, "logs": {}, "data": {}},
    "runner": {"config": {}},
    "backups": {},
}

ARTIFACTS = ["compose", "nginx", "proxy", "renew-script"]


class ProductionEnvironment:
    """Generates the on-disk layout of a self-hosted GitLab deployment."""

    def __init__(
        self,
        settings: DeploymentSettings,
        verbose: bool = False,
        secret_manager: Optional[SecretManager] = None,
        dependency_checker: Optional[DependencyChecker] = None,
    ):
        """
        Initialize with deployment settings.

        Args:
            settings: Resolved deployment settings
            verbose: Enable verbose output
            secret_manager: Credential provisioner, a default one is created if omitted
            dependency_checker: External command checker, a default one is created if omitted
        """
        self.settings = settings
        self.verbose = verbose
        self.file_manager = FileManager(verbose=verbose)
        self.secret_manager = secret_manager or SecretManager(verbose=verbose)
        self.dependency_checker = dependency_checker or DependencyChecker(verbose=verbose)
        self.compose = ComposeManifestGenerator(verbose=verbose)
        self.nginx = NginxConfigGenerator(verbose=verbose)
        self.acme = AcmeRenewalScript(verbose=verbose)

    def directories(self) -> List[str]:
        """List every directory of the deployment tree, parents first."""
        paths = []

        def walk(base: str, spec: Dict[str, Any]):
            for name, children in spec.items():
                path = os.path.join(base, name)
                paths.append(path)
                walk(path, children)

        walk(self.settings.gitlab_dir, DIRECTORY_LAYOUT)
        return paths

    def plan(self) -> Dict[str, Any]:
        """
        Describe a generation run without touching the filesystem.

        Returns:
            Dict[str, Any]: Directories, files and the secrets action
        """
        secrets_action = "reuse" if os.path.exists(self.settings.secrets_file) else "generate"
        return {
            "gitlab_dir": self.settings.gitlab_dir,
            "directories": self.directories(),
            "files": [
                self.settings.compose_file,
                os.path.join(self.settings.nginx_dir, "nginx.conf"),
                os.path.join(self.settings.nginx_dir, "proxy.conf"),
                self.settings.renew_script,
            ],
            "secrets_file": self.settings.secrets_file,
            "secrets_action": secrets_action,
            "owner": self.settings.owner,
        }

    def generate(self, check_dependencies: bool = True, change_owner: bool = True) -> Dict[str, Any]:
        """
        Generate the deployment tree.

        Secrets are provisioned before any artifact is written, so a failure
        there leaves previously generated files untouched.

        Args:
            check_dependencies: Fail early when docker / docker compose are missing
            change_owner: Hand the tree to ``settings.owner`` afterwards

        Returns:
            Dict[str, Any]: Generation results
        """
        if check_dependencies:
            self.dependency_checker.ensure_available()

        logger.info("Generating GitLab deployment for %s in %s", self.settings.domain, self.settings.gitlab_dir)

        self.file_manager.create_directory_structure(self.settings.gitlab_dir, DIRECTORY_LAYOUT)

        secrets, created = self.secret_manager.provision(self.settings.secrets_file)

        files_created = [self.compose.generate_compose_file(self.settings, secrets)]
        files_created.extend(self.nginx.generate_config_files(self.settings))
        files_created.append(self.acme.generate_script(self.settings))

        if change_owner:
            self.file_manager.set_ownership(self.settings.gitlab_dir, self.settings.owner)

        if self.verbose:
            print(f"Successfully generated deployment at {self.settings.gitlab_dir}")
            print(f"Created {len(files_created)} files")

        return {
            "gitlab_dir": self.settings.gitlab_dir,
            "files_created": files_created,
            "secrets_file": self.settings.secrets_file,
            "secrets_created": created,
            "owner_changed": change_owner,
            "cron_entry": self.acme.cron_entry(self.settings),
        }

    def load_secrets(self) -> SecretBundle:
        """Load the existing secrets file without creating one."""
        return self.secret_manager.load_secrets(self.settings.secrets_file)

    def render_artifact(self, name: str) -> str:
        """
        Render a single artifact to text.

        Args:
            name: One of ``compose``, ``nginx``, ``proxy``, ``renew-script``

        Returns:
            str: Rendered content
        """
        if name == "compose":
            return self.compose.render(self.settings, self.load_secrets())
        elif name == "nginx":
            return self.nginx.render_nginx_conf(self.settings)
        elif name == "proxy":
            return self.nginx.render_proxy_conf()
        elif name == "renew-script":
            return self.acme.render(self.settings)

        raise TemplateError(f"Unknown artifact: {name}", suggestions=[f"Choose one of: {', '.join(ARTIFACTS)}"])
