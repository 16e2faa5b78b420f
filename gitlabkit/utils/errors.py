"""Error handling utilities for gitlabkit."""

import sys
import traceback
from typing import Optional

import click


class GitLabKitError(Exception):
    """Base exception for gitlabkit errors."""

    def __init__(
        self,
        message: str,
        details: Optional[str] = None,
        suggestions: Optional[list] = None,
    ):
        self.message = message
        self.details = details
        self.suggestions = suggestions or []
        super().__init__(message)


class ConfigurationError(GitLabKitError):
    """Raised when configuration is invalid or missing."""

    pass


class DependencyError(GitLabKitError):
    """Raised when a required external command is unavailable."""

    pass


class TemplateError(GitLabKitError):
    """Raised when an artifact cannot be rendered."""

    pass


class OwnershipError(GitLabKitError):
    """Raised when the deployment tree cannot be handed to its owner."""

    pass


class SecretsError(GitLabKitError):
    """Base class for credential provisioning failures."""

    pass


class SecurityError(SecretsError):
    """Raised when a generated secret fails validation."""

    pass


class SecretsFileNotFoundError(SecretsError):
    """Raised when a secrets file is required but absent."""

    pass


class MissingKeyError(SecretsError):
    """Raised when a persisted secrets file lacks a required key."""

    def __init__(self, key: str, path: str):
        self.key = key
        self.path = path
        super().__init__(
            f"Secrets file {path} is missing a value for {key}",
            details="The file exists, so it was left untouched.",
            suggestions=create_error_suggestions("secrets_incomplete", path=path),
        )


class PersistFailedError(SecretsError):
    """Raised when the secrets file cannot be written."""

    pass


class PermissionFailedError(SecretsError):
    """Raised when the secrets file mode cannot be restricted."""

    pass


class EntropyUnavailableError(SecretsError):
    """Raised when the system random source fails."""

    pass


class ErrorHandler:
    """Handles and formats errors for user-friendly display."""

    def __init__(self, verbose: bool = False):
        self.verbose = verbose

    def handle_error(self, error: Exception, context: Optional[str] = None) -> None:
        """
        Handle and display error with appropriate formatting.

        Args:
            error: Exception to handle
            context: Optional context about when/where error occurred
        """
        if isinstance(error, GitLabKitError):
            self._handle_gitlabkit_error(error, context)
        else:
            self._handle_generic_error(error, context)

    def _handle_gitlabkit_error(self, error: GitLabKitError, context: Optional[str]) -> None:
        """Handle gitlabkit-specific errors."""
        click.echo(f"✗ {error.message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if error.details:
            click.echo(f"Details: {error.details}", err=True)

        if error.suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in error.suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def _handle_generic_error(self, error: Exception, context: Optional[str]) -> None:
        """Handle generic Python exceptions."""
        error_type = type(error).__name__

        if isinstance(error, FileNotFoundError):
            message = f"File not found: {error}"
            suggestions = [
                "Check that the file path is correct",
                "Ensure the file exists and is readable",
            ]
        elif isinstance(error, PermissionError):
            message = f"Permission denied: {error}"
            suggestions = [
                "Check file/directory permissions",
                "Try running with appropriate privileges",
            ]
        else:
            message = f"{error_type}: {error}"
            suggestions = []

        click.echo(f"✗ {message}", err=True)

        if context:
            click.echo(f"Context: {context}", err=True)

        if suggestions:
            click.echo("\nSuggestions:", err=True)
            for suggestion in suggestions:
                click.echo(f"  • {suggestion}", err=True)

        if self.verbose:
            click.echo("\nFull traceback:", err=True)
            traceback.print_exc()

    def exit_with_error(self, error: Exception, context: Optional[str] = None, exit_code: int = 1) -> None:
        """Handle error and exit with specified code."""
        self.handle_error(error, context)
        sys.exit(exit_code)


def create_error_suggestions(error_type: str, **kwargs) -> list:
    """
    Create contextual error suggestions based on error type and context.

    Args:
        error_type: Type of error
        **kwargs: Additional context information (path, command)

    Returns:
        list: List of suggestion strings
    """
    path = kwargs.get("path", "the secrets file")
    command = kwargs.get("command", "the command")

    suggestions = {
        "secrets_incomplete": [
            f"Restore the missing entry in {path} from a backup",
            f"Delete {path} to generate a fresh set of credentials",
            "Fresh credentials invalidate data already initialized with the old ones",
        ],
        "secrets_missing": [
            "Run 'gitlabkit init' or 'gitlabkit secrets ensure' first",
            "Pass --path if the secrets file lives elsewhere",
        ],
        "command_missing": [
            f"Install {command} and make sure it is on PATH",
            "Use --skip-checks to generate files anyway",
        ],
        "configuration_invalid": [
            "Check YAML syntax in configuration file",
            "Verify all required fields are present",
            "Validate configuration values are correct",
        ],
        "ownership_failed": [
            f"Run 'sudo chown -R <uid>:<gid> {path}' manually",
            "Use --no-chown to keep the current owner",
        ],
    }

    return suggestions.get(error_type, [])


def format_validation_errors(errors: list) -> str:
    """
    Format validation errors for display.

    Args:
        errors: List of validation error messages

    Returns:
        str: Formatted error message
    """
    if not errors:
        return "No validation errors"

    if len(errors) == 1:
        return f"Validation error: {errors[0]}"

    formatted = "Validation errors:\n"
    for i, error in enumerate(errors, 1):
        formatted += f"  {i}. {error}\n"

    return formatted.strip()
