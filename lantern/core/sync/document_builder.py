"""Builds index documents from content items.

The builder flattens an item together with its author, taxonomy terms and
public metadata into the IndexDocument shape sent to the index client.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from lantern.domain.entities import Author, ContentItem, IndexDocument, Term
from lantern.ports.content import ContentAccessor

logger = logging.getLogger(__name__)

# Leading characters of JSON containers; other strings are kept verbatim.
_JSON_CONTAINER_PREFIXES = ("{", "[")


def is_protected_meta(key: str, extra_protected: frozenset[str] = frozenset()) -> bool:
    """Check whether a metadata key is internal and must stay out of the index.

    Underscore-prefixed keys are internal to the content store.

    Args:
        key: Metadata key.
        extra_protected: Additional keys configured as protected.

    Returns:
        True if the key must not be indexed.
    """
    return key.startswith("_") or key in extra_protected


def deserialize_meta_value(value: Any) -> Any:
    """Decode a metadata value from its storage encoding.

    Strings holding a JSON object or array are decoded; anything that fails
    to parse is returned unchanged. Lists are decoded element-wise, since the
    content store may hold several values per key.
    """
    if isinstance(value, list):
        return [deserialize_meta_value(v) for v in value]
    if isinstance(value, str) and value.lstrip().startswith(_JSON_CONTAINER_PREFIXES):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value
    return value


class DocumentBuilder:
    """Transforms content items into index documents."""

    def __init__(
        self,
        content: ContentAccessor,
        protected_meta_keys: Iterable[str] = (),
    ) -> None:
        """Initialize the builder.

        Args:
            content: Content accessor used for author, term and meta lookups.
            protected_meta_keys: Extra metadata keys to keep out of documents.
        """
        self._content = content
        self._protected_meta_keys = frozenset(protected_meta_keys)

    def build(self, item: ContentItem, tenant_id: int | None = None) -> IndexDocument:
        """Build the index document for an item.

        Args:
            item: The content item.
            tenant_id: Tenant recorded on the document. Defaults to the
                item's tenant.

        Returns:
            A freshly built IndexDocument.
        """
        tenant = item.tenant_id if tenant_id is None else tenant_id
        return IndexDocument(
            item=item,
            author=self._prepare_author(item),
            terms=self.prepare_terms(item),
            meta=self.prepare_meta(item),
            tenant_id=tenant,
        )

    def _prepare_author(self, item: ContentItem) -> Author:
        author = self._content.get_author(item.author_id, item.tenant_id)
        # Items whose author was removed still index with blank author fields
        return author if author is not None else Author()

    def prepare_terms(self, item: ContentItem) -> dict[str, list[Term]]:
        """Collect assigned terms grouped by taxonomy name.

        Taxonomies without assigned terms are left out of the mapping.
        """
        terms: dict[str, list[Term]] = {}
        for taxonomy in self._content.get_taxonomies_for(item.content_type, item.tenant_id):
            assigned = list(
                self._content.get_assigned_terms(item.id, taxonomy, item.tenant_id)
            )
            if assigned:
                terms[taxonomy] = assigned
        return terms

    def prepare_meta(self, item: ContentItem) -> dict[str, Any]:
        """Collect public metadata with values deserialized.

        Protected keys are skipped. An item without metadata yields an empty
        mapping.
        """
        raw: Mapping[str, Any] = self._content.get_raw_meta(item.id, item.tenant_id)
        if not raw:
            return {}

        prepared: dict[str, Any] = {}
        for key, value in raw.items():
            if is_protected_meta(key, self._protected_meta_keys):
                continue
            prepared[key] = deserialize_meta_value(value)

        logger.debug(
            "Prepared %d of %d meta keys for item %d", len(prepared), len(raw), item.id
        )
        return prepared
