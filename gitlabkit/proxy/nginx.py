"""nginx reverse proxy configuration for GitLab, the registry and Pages."""

import logging
import os
import re
from typing import Dict, List, Tuple

from ..config.settings import DeploymentSettings
from ..templates import render_template
from ..utils.files import FileManager

logger = logging.getLogger(__name__)

# Ports served by the gitlab-ce container with its bundled nginx disabled
UPSTREAMS: List[Tuple[str, str]] = [
    ("gitlab", "gitlab:8181"),
    ("registry", "gitlab:5000"),
    ("pages", "gitlab:8090"),
]

SSL_CERTIFICATE = "/etc/nginx/ssl/fullchain.pem"
SSL_CERTIFICATE_KEY = "/etc/nginx/ssl/privkey.pem"

CLIENT_MAX_BODY_SIZE = "1024m"


class NginxConfigGenerator:
    """Generates nginx.conf and proxy.conf for the nginx container."""

    def __init__(self, verbose: bool = False):
        """Initialize nginx configuration generator."""
        self.verbose = verbose
        self.file_manager = FileManager(verbose=verbose)

    def tls_virtual_hosts(self, settings: DeploymentSettings) -> List[Dict[str, str]]:
        """
        Build the HTTPS server blocks.

        Args:
            settings: Deployment settings

        Returns:
            List[Dict[str, str]]: server_name and upstream per virtual host
        """
        pages_pattern = r"~^(.+)\.pages\." + re.escape(settings.domain) + "$"
        return [
            {"server_name": settings.domain, "upstream": "gitlab"},
            {"server_name": f"registry.{settings.domain}", "upstream": "registry"},
            {"server_name": pages_pattern, "upstream": "pages"},
        ]

    def render_nginx_conf(self, settings: DeploymentSettings) -> str:
        """Render the main nginx.conf."""
        return render_template(
            "nginx.conf.j2",
            settings=settings,
            upstreams=UPSTREAMS,
            tls_vhosts=self.tls_virtual_hosts(settings),
            ssl_certificate=SSL_CERTIFICATE,
            ssl_certificate_key=SSL_CERTIFICATE_KEY,
        )

    def render_proxy_conf(self) -> str:
        """Render the shared proxy header and timeout settings."""
        return render_template("proxy.conf.j2", client_max_body_size=CLIENT_MAX_BODY_SIZE)

    def generate_config_files(self, settings: DeploymentSettings) -> List[str]:
        """
        Write nginx.conf and proxy.conf into the deployment's nginx directory.

        Args:
            settings: Deployment settings

        Returns:
            List[str]: Paths of the written files
        """
        nginx_conf = self.file_manager.write_file(
            os.path.join(settings.nginx_dir, "nginx.conf"), self.render_nginx_conf(settings)
        )
        proxy_conf = self.file_manager.write_file(
            os.path.join(settings.nginx_dir, "proxy.conf"), self.render_proxy_conf()
        )

        logger.info("Generated nginx configuration in %s", settings.nginx_dir)

        return [nginx_conf, proxy_conf]
