"""Deployment settings passed to every artifact renderer."""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_GITLAB_DIR = os.path.join("~", "gitlab")
DEFAULT_INTRANET_HOSTNAME = "gitlab.intra"
DEFAULT_OWNER = "1000:1000"
DEFAULT_DNS_PROVIDER = "dns_aliyun"
DEFAULT_ACME_SERVER = "letsencrypt"
DEFAULT_RENEW_SCHEDULE = "0 2 1 */2 *"

SECRETS_FILENAME = "secrets.env"


def derive_base_domain(domain: str) -> str:
    """Strip the first label of ``domain`` (``gitlab.example.com`` -> ``example.com``)."""
    labels = domain.split(".")
    if len(labels) <= 2:
        return domain
    return ".".join(labels[1:])


@dataclass(frozen=True)
class DeploymentSettings:
    """Where and for which domain the deployment files are generated."""

    domain: str
    gitlab_dir: str = DEFAULT_GITLAB_DIR
    base_domain: Optional[str] = None
    intranet_hostname: str = DEFAULT_INTRANET_HOSTNAME
    secrets_file: Optional[str] = None
    owner: str = DEFAULT_OWNER
    acme_dns_provider: str = DEFAULT_DNS_PROVIDER
    acme_server: str = DEFAULT_ACME_SERVER
    renew_schedule: str = DEFAULT_RENEW_SCHEDULE

    def __post_init__(self):
        # Frozen dataclass: derived defaults go through object.__setattr__
        gitlab_dir = os.path.abspath(os.path.expanduser(self.gitlab_dir))
        object.__setattr__(self, "gitlab_dir", gitlab_dir)

        if not self.base_domain:
            object.__setattr__(self, "base_domain", derive_base_domain(self.domain))

        if self.secrets_file:
            object.__setattr__(self, "secrets_file", os.path.abspath(os.path.expanduser(self.secrets_file)))
        else:
            object.__setattr__(self, "secrets_file", os.path.join(gitlab_dir, SECRETS_FILENAME))

    @property
    def compose_file(self) -> str:
        return os.path.join(self.gitlab_dir, "docker-compose.yml")

    @property
    def nginx_dir(self) -> str:
        return os.path.join(self.gitlab_dir, "nginx")

    @property
    def ssl_dir(self) -> str:
        return os.path.join(self.nginx_dir, "ssl")

    @property
    def backups_dir(self) -> str:
        return os.path.join(self.gitlab_dir, "backups")

    @property
    def renew_script(self) -> str:
        return os.path.join(self.backups_dir, "renew-cert.sh")

    @property
    def renew_log(self) -> str:
        return os.path.join(self.backups_dir, "cert-renew.log")
