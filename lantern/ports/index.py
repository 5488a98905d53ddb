"""Index client port.

Defines the boundary to the search backend. Transport details belong to the
adapters; the sync engine only sees documents, target index ids and
responses.
"""

from typing import Protocol

from lantern.domain.entities import IndexDocument, IndexResponse


class IndexClientError(Exception):
    """Raised by index client adapters when the backend rejects a call.

    The sync engine treats this like an empty response: nothing is marked and
    the item is retried on the next event or bulk pass.
    """


class IndexClient(Protocol):
    """Protocol for writing to and deleting from the search index."""

    def index_document(
        self, document: IndexDocument, target_index_id: int | None
    ) -> IndexResponse | None:
        """Index a document (idempotent upsert keyed on tenant and item id).

        Args:
            document: The document to write.
            target_index_id: Tenant whose index receives the write. None
                means the document's own tenant.

        Returns:
            The response on success, None (or a falsy value) on failure.
        """
        ...

    def delete_document(
        self,
        document_id: str,
        source_index_hint: str | None = None,
        target_index_id: int | None = None,
    ) -> bool | None:
        """Delete a document from the index.

        Args:
            document_id: Id returned by index_document.
            source_index_hint: Optional physical index name the document is
                known to live in.
            target_index_id: Tenant whose index holds the document.

        Returns:
            True on success, None or False otherwise.
        """
        ...

    def close(self) -> None:
        """Release connections held by the client."""
        ...
