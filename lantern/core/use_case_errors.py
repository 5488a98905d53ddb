"""Use case error handling utilities.

Provides consistent exception logging and formatting at the boundaries that
must not raise: lifecycle event handlers are fire-and-forget, so failures
there end up in the log rather than in front of the user.

Design principles:
1. KeyboardInterrupt and SystemExit are always re-raised (never caught)
2. LanternDomainError subclasses carry user-friendly messages
3. Unexpected exceptions are logged with a traceback
"""

import logging

from lantern.domain.exceptions import LanternDomainError
from lantern.ports.repositories import SyncStateError

logger = logging.getLogger(__name__)


def format_error_message(exception: Exception, operation_name: str) -> str:
    """Format an exception into a user-friendly error message.

    Handles different exception types appropriately:
    - LanternDomainError: Uses the error's message directly
    - SyncStateError/OSError: Adds context about the state database
    - ValueError/RuntimeError: Includes exception message with operation context
    - Other exceptions: Returns a generic "internal error" message

    Args:
        exception: The exception that was caught.
        operation_name: Name of the operation for error messages (e.g., "bulk sync").

    Returns:
        User-friendly error message string.
    """
    if isinstance(exception, LanternDomainError):
        return exception.message
    elif isinstance(exception, (SyncStateError, OSError)):
        return (
            f"Sync state error: {exception}. "
            "Check that the state database is writable."
        )
    elif isinstance(exception, (ValueError, RuntimeError)):
        return f"{operation_name.capitalize()} error: {exception}"
    else:
        return f"Internal error during {operation_name}. Check logs for details."


def log_use_case_error(exception: Exception, operation_name: str) -> None:
    """Log an exception from a use case with appropriate severity.

    - LanternDomainError: ERROR level (expected domain errors)
    - SyncStateError/OSError/ValueError/RuntimeError: ERROR level
    - Other exceptions: EXCEPTION level (includes traceback)

    Args:
        exception: The exception that was caught.
        operation_name: Name of the operation for log messages.
    """
    if isinstance(exception, LanternDomainError):
        logger.error(str(exception))
    elif isinstance(exception, (SyncStateError, OSError)):
        logger.error(f"Sync state error during {operation_name}: {exception}")
    elif isinstance(exception, (ValueError, RuntimeError)):
        logger.error(f"Error during {operation_name}: {exception}")
    else:
        logger.exception(f"Unexpected error during {operation_name}")
