"""External command checks run before generating a deployment."""

import logging
import shutil
import subprocess
from typing import Dict, List

from ..utils.errors import DependencyError, create_error_suggestions

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 10


class DependencyChecker:
    """Checks that the host can run the generated deployment."""

    def __init__(self, verbose: bool = False):
        """Initialize dependency checker."""
        self.verbose = verbose

    def check_command(self, name: str) -> bool:
        """Check if a command is available on PATH."""
        return shutil.which(name) is not None

    def check_compose(self) -> bool:
        """Check that the Docker Compose v2 plugin answers ``docker compose version``."""
        if not self.check_command("docker"):
            return False

        try:
            result = subprocess.run(
                ["docker", "compose", "version"],
                capture_output=True,
                text=True,
                timeout=COMMAND_TIMEOUT,
            )
        except subprocess.TimeoutExpired:
            logger.warning("'docker compose version' timed out after %ss", COMMAND_TIMEOUT)
            return False
        except FileNotFoundError:
            return False

        if result.returncode != 0:
            logger.debug("'docker compose version' failed: %s", result.stderr.strip())

        return result.returncode == 0

    def check_all(self) -> Dict[str, bool]:
        """
        Run every dependency check.

        Returns:
            Dict[str, bool]: Availability per dependency
        """
        results = {
            "docker": self.check_command("docker"),
            "docker compose": self.check_compose(),
        }

        if self.verbose:
            for name, available in results.items():
                print(f"{name}: {'available' if available else 'missing'}")

        return results

    def missing_dependencies(self) -> List[str]:
        """Return the names of unavailable dependencies."""
        return [name for name, available in self.check_all().items() if not available]

    def ensure_available(self) -> None:
        """
        Fail unless every dependency is available.

        Raises:
            DependencyError: Listing the missing commands
        """
        missing = self.missing_dependencies()
        if missing:
            raise DependencyError(
                f"Required commands not available: {', '.join(missing)}",
                suggestions=create_error_suggestions("command_missing", command=" and ".join(missing)),
            )
