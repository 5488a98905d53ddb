"""CLI error handling with actionable hints.

Provides consistent error formatting and common error factory functions
for all lantern CLI commands.
"""

from typing import NoReturn

import click


class LanternCliError(click.ClickException):
    """CLI error with actionable hint for users.

    Attributes:
        message: The primary error message.
        hint: Optional actionable suggestion for the user.

    Example:
        raise LanternCliError(
            "Not in a lantern deployment",
            hint="Run 'lantern init' to create one"
        )
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        """Initialize the error with message and optional hint.

        Args:
            message: The primary error message.
            hint: Optional actionable suggestion for the user.
        """
        super().__init__(message)
        self.hint = hint

    def format_message(self) -> str:
        """Format the error message with hint if present.

        Returns:
            Formatted error message, with hint on a new line if provided.
        """
        msg = self.message
        if self.hint:
            msg += f"\nHint: {self.hint}"
        return msg


def lantern_dir_not_found_error() -> NoReturn:
    """Raise error when no .lantern directory is found.

    Raises:
        LanternCliError: Always raises with initialization hint.
    """
    raise LanternCliError(
        "No .lantern directory found",
        hint="Run 'lantern init' to create one",
    )


def content_export_missing_error(path: str) -> NoReturn:
    """Raise error when the configured content export does not exist.

    Args:
        path: The export path from the config.

    Raises:
        LanternCliError: Always raises with config hint.
    """
    raise LanternCliError(
        f"Content export not found: {path}",
        hint="Set [content] export_path in .lantern/config.toml",
    )


def bulk_sync_failed_error(tenant_ids: list[int]) -> NoReturn:
    """Raise error when one or more tenants failed during a bulk sync.

    Args:
        tenant_ids: Tenants whose sync was aborted.

    Raises:
        LanternCliError: Always raises with retry hint.
    """
    tenants = ", ".join(str(t) for t in tenant_ids)
    raise LanternCliError(
        f"Bulk sync failed for tenant(s): {tenants}",
        hint="Progress is saved per item; run 'lantern run' again to resume",
    )
