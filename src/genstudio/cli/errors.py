"""
Standardized error handling and exit codes for the genstudio CLI.

Commands report failures through print_error so every message has the same
shape: what went wrong, why, and what to try next.
"""

from enum import IntEnum

from rich.console import Console

from genstudio.core.errors import (
    BatchInFlightError,
    GenStudioError,
    InvalidImportError,
    InvalidSlotCountError,
    MissingApiKeyError,
    ParentNotFoundError,
    StorageQuotaExceededError,
)

console = Console()


class ExitCode(IntEnum):
    """Standard exit codes for genstudio CLI operations."""

    SUCCESS = 0
    """Operation completed successfully."""

    GENERAL_ERROR = 1
    """Generic error, including batches where some slots failed."""

    USER_ERROR = 2
    """Bad input or configuration (actionable by the user)."""

    SIGINT = 130
    """Terminated by SIGINT (Ctrl+C) - Unix standard."""


def print_error(
    problem: str,
    *,
    reason: str | None = None,
    solution: str | None = None,
) -> None:
    """
    Print a standardized error message with actionable guidance.

    Args:
        problem: Brief description of what went wrong
        reason: Optional explanation of why it happened
        solution: Optional command or action to fix it

    Example:
        >>> print_error(
        ...     "Import failed",
        ...     reason="invalid format",
        ...     solution="genstudio export --out backup.json  # to see the expected shape",
        ... )
    """
    console.print(f"[red]Error:[/red] {problem}")

    if reason:
        console.print(f"[dim]{reason}[/dim]")

    if solution:
        console.print(f"[cyan]→ Try:[/cyan] {solution}")


def print_quota_warning() -> None:
    """Print the warning shown when a write was dropped for capacity."""
    console.print(
        "[yellow]Warning:[/yellow] Storage is full; the last change was not saved. "
        "Export your data and delete old items to free space."
    )


def print_studio_error(error: GenStudioError) -> ExitCode:
    """
    Print a domain error with guidance matching its type.

    Returns:
        The exit code the command should use
    """
    if isinstance(error, InvalidImportError):
        print_error(
            "Import failed: invalid format",
            reason=error.detail,
            solution="genstudio export --out sample.json  # to see the expected shape",
        )
        return ExitCode.USER_ERROR
    if isinstance(error, BatchInFlightError):
        print_error(
            error.message,
            reason="Only one generation batch may run per item at a time",
            solution="Wait for the current batch to finish",
        )
        return ExitCode.USER_ERROR
    if isinstance(error, InvalidSlotCountError):
        print_error(error.message, solution="--count 3")
        return ExitCode.USER_ERROR
    if isinstance(error, ParentNotFoundError):
        print_error(error.message, solution="genstudio list <collection>  # to find valid IDs")
        return ExitCode.USER_ERROR
    if isinstance(error, MissingApiKeyError):
        print_error(
            error.message,
            reason="Provider capabilities authenticate with the API key in Settings",
            solution="genstudio settings set --api-key <key>",
        )
        return ExitCode.USER_ERROR
    if isinstance(error, StorageQuotaExceededError):
        print_error(
            error.message,
            reason="The local store has reached its capacity",
            solution="genstudio export --out backup.json && genstudio delete ...",
        )
        return ExitCode.GENERAL_ERROR

    print_error(error.message)
    return ExitCode.GENERAL_ERROR
