"""acme.sh integration for wildcard Let's Encrypt certificates."""

import logging

from ..config.settings import DeploymentSettings
from ..templates import render_template
from ..utils.files import FileManager

logger = logging.getLogger(__name__)

SCRIPT_MODE = 0o755


class AcmeRenewalScript:
    """Generates the certificate renewal script run from cron."""

    def __init__(self, verbose: bool = False):
        """
        Initialize renewal script generator.

        Args:
            verbose: Enable verbose output
        """
        self.verbose = verbose
        self.file_manager = FileManager(verbose=verbose)

    def render(self, settings: DeploymentSettings) -> str:
        """
        Render the renewal script.

        The script issues a wildcard ECC certificate for the base domain via
        the configured DNS provider, installs it into the nginx ssl directory
        and reloads nginx when its container is up.

        Args:
            settings: Deployment settings

        Returns:
            str: Script text
        """
        return render_template("renew-cert.sh.j2", settings=settings)

    def generate_script(self, settings: DeploymentSettings) -> str:
        """
        Write the executable renewal script into the backups directory.

        Args:
            settings: Deployment settings

        Returns:
            str: Path to the script
        """
        path = self.file_manager.write_file(settings.renew_script, self.render(settings), mode=SCRIPT_MODE)

        logger.info("Generated certificate renewal script: %s", path)

        return path

    def cron_entry(self, settings: DeploymentSettings) -> str:
        """Return the crontab line that runs the renewal script."""
        return f"{settings.renew_schedule} {settings.renew_script} >> {settings.renew_log} 2>&1"
