"""CLI error handling for levo-build.

Maps pipeline and configuration failures to user-facing messages and
process exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError

from levo_build.errors import BuildError, MissingDependencyError
from levo_build.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails


# Exit codes following sysexits.h convention
EXIT_USER_ERROR = 1  # Build failure (compile, adapt, introspect, publish, bad config)
EXIT_SYSTEM_ERROR = 2  # Broken environment (missing adapter, missing file, permissions)


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        """Initialize CLIError.

        Args:
            message: User-facing error message.
            exit_code: Exit code for the CLI.
        """
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(self.format_message())


def exit_code_for(err: BuildError) -> int:
    """Exit code for a pipeline error.

    A missing dependency means the environment is broken rather than the
    build, so it gets the system error code.
    """
    if isinstance(err, MissingDependencyError):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format Pydantic validation error into user-friendly message.

    Args:
        err: Pydantic ValidationError instance.

    Returns:
        Formatted error message with field paths and issues.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - target_triple: String should match pattern..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def handle_build_error(err: BuildError) -> NoReturn:
    """Raise a CLIError for a configuration or pipeline error.

    Raises:
        CLIError: Always raises with the error's user message.
    """
    raise CLIError(err.user_message, exit_code=exit_code_for(err))


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle a missing configuration file.

    Raises:
        CLIError: Always raises with a hint about ``levo-build init``.
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Run 'levo-build init' to write a configuration, or omit --config to use defaults.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_not_a_file(file_path: str) -> NoReturn:
    """Handle a configuration path that names a directory.

    Raises:
        CLIError: Always raises with the system error code.
    """
    raise CLIError(f"Not a file: {file_path}", exit_code=EXIT_SYSTEM_ERROR)


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Raises:
        CLIError: Always raises with formatted error message.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )
