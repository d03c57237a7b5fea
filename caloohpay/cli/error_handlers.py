"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click
import requests

from caloohpay.cli.utils.formatters import format_error, format_warning
from caloohpay.services.pagerduty_service import ScheduleResponseError
from caloohpay.services.retry_handler import RetryExhaustedException


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Initialize CLI error.

        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Missing or invalid configuration, such as an undefined API token."""

    pass


def _echo_error(message: str, hint: Optional[str] = None) -> None:
    click.echo(format_error(message), err=True)
    if hint:
        click.echo(format_warning(f"Hint: {hint}"), err=True)


def _handle_http_error(error: requests.HTTPError) -> int:
    status_code = error.response.status_code if error.response is not None else None

    if status_code == 401:
        _echo_error(
            "Authentication Failed",
            "Check API_TOKEN in your environment or .env file, or pass --key",
        )
        return 5

    if status_code == 403:
        _echo_error(
            "Permission Denied",
            "Ensure your API token can read the requested schedules",
        )
        return 6

    if status_code == 404:
        _echo_error("Schedule Not Found", "Verify the rota ids passed with --rota-ids")
        return 7

    if status_code == 429:
        _echo_error(
            "Rate Limit Exceeded",
            "Wait a few minutes before retrying, or request fewer rotas at once",
        )
        return 8

    _echo_error(f"PagerDuty API Error (HTTP {status_code})")
    click.echo(format_warning(f"Details: {error}"), err=True)
    return 9


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Report an error to the user and choose the exit code.

    Args:
        error: The exception that occurred
        debug: Whether to show full stack trace

    Returns:
        Exit code (1-9 for known error types, 130 for abort, 255 otherwise)
    """
    if isinstance(error, ConfigurationError):
        _echo_error(f"Configuration Error: {error.message}", error.recovery_hint)
        return 1

    if isinstance(error, (ScheduleResponseError, RetryExhaustedException)):
        _echo_error(f"API Error: {error}")
        return 2

    if isinstance(error, requests.HTTPError):
        return _handle_http_error(error)

    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        _echo_error(
            f"API Error: {type(error).__name__}",
            "Check your network connection and PAGERDUTY_API_URL",
        )
        return 2

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"), err=True)
        return 130  # Standard exit code for SIGINT

    _echo_error(f"Unexpected Error: {type(error).__name__}")
    click.echo(str(error), err=True)

    if debug:
        click.echo("\nFull stack trace:", err=True)
        click.echo(
            "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            ),
            err=True,
        )
    else:
        click.echo(
            format_warning("\nRun with --debug flag for full stack trace"), err=True
        )

    return 255


def with_error_handling(debug: bool = False):
    """
    Context manager adding standardized error handling to CLI commands.

    Any exception raised inside the block is reported with handle_cli_error
    and turned into a process exit with the matching exit code.

    Args:
        debug: Whether to show full stack traces

    Example:
        @click.command()
        @click.option('--debug', is_flag=True)
        def my_command(debug):
            with with_error_handling(debug):
                # Command implementation
                pass
    """

    class ErrorHandler:
        def __init__(self, show_debug: bool):
            self.show_debug = show_debug

        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc_val, exc_tb):
            if exc_val is not None and not isinstance(exc_val, SystemExit):
                sys.exit(handle_cli_error(exc_val, self.show_debug))
            return False

    return ErrorHandler(debug)
