"""Pytest configuration and shared fixtures."""

import os
import shutil
import tempfile

import pytest

from gitlabkit.config.settings import DeploymentSettings
from gitlabkit.secrets.manager import SecretBundle


@pytest.fixture
def temp_directory():
    """Create a temporary directory for testing."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def gitlab_dir(temp_directory):
    """Deployment directory inside the temporary directory (not created)."""
    return os.path.join(temp_directory, "gitlab")


@pytest.fixture
def settings(gitlab_dir):
    """Deployment settings for gitlab.example.com."""
    return DeploymentSettings(domain="gitlab.example.com", gitlab_dir=gitlab_dir)


@pytest.fixture
def secret_bundle():
    """Fixed credentials using the full base64 alphabet."""
    return SecretBundle(
        db_password="Db+pass/word0123456789abcdefABCD",
        minio_password="Mi+nio/pass0123456789abcdefABCDE",
        smtp_password="Sm+tp/pass0123456789abcd",
    )


@pytest.fixture
def sample_config():
    """Sample gitlabkit.yml contents."""
    return {
        "deployment": {
            "domain": "git.example.org",
            "intranet_hostname": "git.lan",
            "owner": "1001:1001",
        },
        "acme": {
            "dns_provider": "dns_cf",
            "renew_schedule": "30 3 * * 0",
        },
    }


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop GITLABKIT_* variables inherited from the caller."""
    for name in list(os.environ):
        if name.startswith("GITLABKIT_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def isolate_filesystem(temp_directory, monkeypatch):
    """Isolate filesystem operations to temporary directory."""
    monkeypatch.chdir(temp_directory)
    return temp_directory
