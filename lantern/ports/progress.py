"""Progress reporting protocol for long-running operations.

Defines callback interface for reporting progress during bulk syncs.
"""

from typing import Protocol


class ProgressCallback(Protocol):
    """Protocol for progress reporting callbacks.

    Implementations can use this to provide visual progress feedback while a
    tenant's listing is being synced, without the core engine depending on
    specific UI libraries.
    """

    def on_start(self, total: int, description: str) -> None:
        """Called when a tenant's page starts.

        Args:
            total: Number of items in the page.
            description: Description of the operation.
        """
        ...

    def on_progress(self, current: int, item_description: str | None = None) -> None:
        """Called after each item's cursor checkpoint.

        Args:
            current: Current item index within the page (1-based).
            item_description: Optional description of the item just synced.
        """
        ...

    def on_complete(self) -> None:
        """Called when the page is done."""
        ...
