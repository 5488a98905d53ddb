"""Content accessor port.

Read-only view over the content store. Every call takes an explicit tenant
id; implementations must not depend on an ambient "current tenant".
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from lantern.domain.entities import Author, ContentItem, Term


class ContentAccessor(Protocol):
    """Protocol for reading content items and their related data."""

    def get_item(self, item_id: int, tenant_id: int) -> ContentItem | None:
        """Fetch a content item.

        Args:
            item_id: The item identifier.
            tenant_id: Tenant owning the item.

        Returns:
            The item if found, None otherwise.
        """
        ...

    def get_author(self, user_id: int, tenant_id: int) -> Author | None:
        """Fetch author fields for a user, or None if the user is unknown."""
        ...

    def get_taxonomies_for(self, content_type: str, tenant_id: int) -> Sequence[str]:
        """List taxonomy names registered for a content type, in a stable order."""
        ...

    def get_assigned_terms(
        self, item_id: int, taxonomy: str, tenant_id: int
    ) -> Sequence[Term]:
        """List terms of one taxonomy assigned to an item, in assignment order."""
        ...

    def get_raw_meta(self, item_id: int, tenant_id: int) -> Mapping[str, Any]:
        """Return the item's metadata as stored (values not yet deserialized)."""
        ...

    def list_publishable_items(
        self,
        tenant_id: int,
        content_types: frozenset[str],
        offset: int,
        page_size: int,
    ) -> Sequence[ContentItem]:
        """List published items of the given types.

        The ordering must be stable across calls: the bulk sync uses offset
        as a resume position.

        Args:
            tenant_id: Tenant to list.
            content_types: Content types to include.
            offset: Number of items to skip.
            page_size: Maximum number of items to return.

        Returns:
            Up to page_size items, empty when offset is past the end.
        """
        ...

    def get_tenant_ids(self) -> Sequence[int]:
        """List all tenant ids known to the content store."""
        ...

    def can_edit(self, item_id: int, tenant_id: int) -> bool:
        """Check whether the acting user may edit the item."""
        ...
