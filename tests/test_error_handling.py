"""Tests for error handling system."""

from unittest.mock import patch

import click
from click.testing import CliRunner

from gitlabkit.utils.errors import (
    ConfigurationError,
    DependencyError,
    EntropyUnavailableError,
    ErrorHandler,
    GitLabKitError,
    MissingKeyError,
    PermissionFailedError,
    PersistFailedError,
    SecretsError,
    TemplateError,
    create_error_suggestions,
    format_validation_errors,
)


class TestGitLabKitError:
    """Test custom error classes."""

    def test_gitlabkit_error_basic(self):
        """Test basic GitLabKitError functionality."""
        error = GitLabKitError("Test error message")

        assert str(error) == "Test error message"
        assert error.message == "Test error message"
        assert error.details is None
        assert error.suggestions == []

    def test_gitlabkit_error_with_details(self):
        """Test GitLabKitError with details and suggestions."""
        suggestions = ["Try this", "Or try that"]
        error = GitLabKitError("Test error", details="Detailed explanation", suggestions=suggestions)

        assert error.message == "Test error"
        assert error.details == "Detailed explanation"
        assert error.suggestions == suggestions

    def test_specific_error_types(self):
        """Test specific error type inheritance."""
        for error_class in (ConfigurationError, DependencyError, TemplateError, SecretsError):
            assert isinstance(error_class("error"), GitLabKitError)

    def test_provisioning_errors_are_secrets_errors(self):
        """Every provisioning failure shares one base class."""
        for error_class in (PersistFailedError, PermissionFailedError, EntropyUnavailableError):
            assert isinstance(error_class("error"), SecretsError)
        assert isinstance(MissingKeyError("DB_PASSWORD", "/srv/secrets.env"), SecretsError)

    def test_missing_key_error(self):
        """MissingKeyError explains that the file was kept."""
        error = MissingKeyError("SMTP_PASSWORD", "/srv/gitlab/secrets.env")

        assert error.message == "Secrets file /srv/gitlab/secrets.env is missing a value for SMTP_PASSWORD"
        assert "untouched" in error.details
        assert any("/srv/gitlab/secrets.env" in suggestion for suggestion in error.suggestions)


class TestErrorHandler:
    """Test error handler functionality."""

    def setup_method(self):
        """Setup test environment."""
        self.handler = ErrorHandler(verbose=False)
        self.verbose_handler = ErrorHandler(verbose=True)

    def test_handle_gitlabkit_error(self):
        """Test handling gitlabkit-specific errors."""
        error = GitLabKitError(
            "Test error message",
            details="Error details",
            suggestions=["Suggestion 1", "Suggestion 2"],
        )

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error, "Test context")

            # Error, context, details, header and two suggestions
            assert mock_echo.call_count == 6

            first_call = mock_echo.call_args_list[0]
            assert first_call.args[0] == "✗ Test error message"
            assert first_call.kwargs["err"] is True

    def test_handle_generic_error_file_not_found(self):
        """Test handling FileNotFoundError."""
        error = FileNotFoundError("test.txt not found")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

            assert mock_echo.called
            error_message = str(mock_echo.call_args_list[0])
            assert "File not found" in error_message

    def test_handle_generic_error_permission_denied(self):
        """Test handling PermissionError."""
        error = PermissionError("Permission denied for file")

        with patch("click.echo") as mock_echo:
            self.handler.handle_error(error)

            assert mock_echo.called
            error_message = str(mock_echo.call_args_list[0])
            assert "Permission denied" in error_message

    def test_handle_generic_error_other(self):
        """Other exceptions are shown with their type."""
        with patch("click.echo") as mock_echo:
            self.handler.handle_error(ValueError("bad value"))

            assert mock_echo.call_args_list[0].args[0] == "✗ ValueError: bad value"

    def test_handle_error_with_verbose(self):
        """Test error handling with verbose output."""
        error = GitLabKitError("Test error")

        with patch("click.echo"):
            with patch("traceback.print_exc") as mock_traceback:
                self.verbose_handler.handle_error(error)

                mock_traceback.assert_called_once()

    def test_handle_error_without_verbose_has_no_traceback(self):
        """Tracebacks are reserved for --verbose."""
        with patch("click.echo"):
            with patch("traceback.print_exc") as mock_traceback:
                self.handler.handle_error(GitLabKitError("Test error"))

                mock_traceback.assert_not_called()

    def test_exit_with_error(self):
        """Test exit_with_error functionality."""
        error = GitLabKitError("Fatal error")

        with patch("click.echo"):
            with patch("sys.exit") as mock_exit:
                self.handler.exit_with_error(error, exit_code=2)

                mock_exit.assert_called_once_with(2)


class TestErrorUtilities:
    """Test error utility functions."""

    def test_create_error_suggestions_with_context(self):
        """Context values are substituted."""
        suggestions = create_error_suggestions("command_missing", command="docker")

        assert suggestions[0] == "Install docker and make sure it is on PATH"

    def test_create_error_suggestions_unknown(self):
        """Test suggestions for unknown error type."""
        suggestions = create_error_suggestions("unknown_error_type")

        assert suggestions == []

    def test_format_validation_errors_single(self):
        """Test formatting single validation error."""
        errors = ["deployment.owner: 'git' does not match"]

        result = format_validation_errors(errors)

        assert "Validation error:" in result
        assert "deployment.owner" in result

    def test_format_validation_errors_multiple(self):
        """Test formatting multiple validation errors."""
        errors = [
            "deployment.owner: 'git' does not match",
            "acme.dns_provider: 'cloudflare' does not match",
            "Additional properties are not allowed",
        ]

        result = format_validation_errors(errors)

        assert "Validation errors:" in result
        assert "1." in result
        assert "2." in result
        assert "3." in result

    def test_format_validation_errors_empty(self):
        """Test formatting empty validation errors."""
        errors = []

        result = format_validation_errors(errors)

        assert result == "No validation errors"


class TestClickIntegration:
    """Test error handling integration with Click commands."""

    def test_cli_error_handling(self):
        """Errors routed through the handler exit with status 1."""

        @click.command()
        def failing_command():
            try:
                raise ConfigurationError("Test config error", suggestions=["Fix it"])
            except ConfigurationError as e:
                ErrorHandler().exit_with_error(e, "Testing")

        runner = CliRunner()
        result = runner.invoke(failing_command)

        assert result.exit_code == 1
        assert "✗ Test config error" in result.output
        assert "Context: Testing" in result.output
        assert "• Fix it" in result.output
