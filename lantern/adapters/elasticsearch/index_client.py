"""Elasticsearch adapter implementing the IndexClient protocol.

Documents are written with a deterministic id ("<tenant>-<item>") so that a
repeated index call overwrites the existing document instead of adding a
second copy. Index mappings are left to whoever provisions the cluster.
"""

import logging

from elasticsearch import (
    ApiError,
    ConnectionTimeout,
    Elasticsearch,
    NotFoundError,
    TransportError,
)

from lantern.domain.config import GLOBAL_TENANT_ID
from lantern.domain.entities import IndexDocument, IndexResponse
from lantern.ports.index import IndexClientError

logger = logging.getLogger(__name__)


def document_id_for(document: IndexDocument) -> str:
    """Deterministic Elasticsearch id for a document."""
    return f"{document.tenant_id}-{document.item_id}"


class ElasticsearchIndexClient:
    """IndexClient writing to one Elasticsearch index per tenant.

    Tenant N maps to "<prefix>-N"; the global tenant maps to
    "<prefix>-global".
    """

    def __init__(
        self,
        hosts: list[str],
        index_prefix: str = "lantern",
        request_timeout: float = 10.0,
        client: Elasticsearch | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            hosts: Elasticsearch node URLs.
            index_prefix: Prefix for physical index names.
            request_timeout: Seconds before a request fails with TimeoutError.
                Timed-out requests are not retried.
            client: Pre-built Elasticsearch client (mainly for tests).
        """
        self._es = client or Elasticsearch(
            hosts, request_timeout=request_timeout, retry_on_timeout=False
        )
        self._index_prefix = index_prefix

    def index_name(self, target_index_id: int | None, tenant_id: int) -> str:
        """Physical index name for a target tenant index."""
        target = tenant_id if target_index_id is None else target_index_id
        if target == GLOBAL_TENANT_ID:
            return f"{self._index_prefix}-global"
        return f"{self._index_prefix}-{target}"

    def index_document(
        self, document: IndexDocument, target_index_id: int | None
    ) -> IndexResponse | None:
        index = self.index_name(target_index_id, document.tenant_id)
        try:
            response = self._es.index(
                index=index,
                id=document_id_for(document),
                document=document.to_payload(),
            )
        except ConnectionTimeout as e:
            raise TimeoutError(f"Timed out indexing into {index}") from e
        except (ApiError, TransportError) as e:
            raise IndexClientError(f"Indexing into {index} failed: {e}") from e

        logger.debug("Indexed %s into %s: %s", response.get("_id"), index, response.get("result"))
        return IndexResponse(document_id=response.get("_id"))

    def delete_document(
        self,
        document_id: str,
        source_index_hint: str | None = None,
        target_index_id: int | None = None,
    ) -> bool | None:
        if source_index_hint:
            index = source_index_hint
        elif target_index_id is not None:
            index = self.index_name(target_index_id, target_index_id)
        else:
            # Without a target, the tenant is encoded in the document id
            try:
                tenant = int(document_id.split("-", 1)[0])
            except ValueError as e:
                raise IndexClientError(
                    f"Cannot derive an index for document {document_id!r}"
                ) from e
            index = self.index_name(None, tenant)

        try:
            self._es.delete(index=index, id=document_id)
        except NotFoundError:
            logger.debug("Document %s already absent from %s", document_id, index)
            return None
        except ConnectionTimeout as e:
            raise TimeoutError(f"Timed out deleting from {index}") from e
        except (ApiError, TransportError) as e:
            raise IndexClientError(f"Deleting from {index} failed: {e}") from e
        return True

    def close(self) -> None:
        """Close the underlying Elasticsearch transport."""
        self._es.close()
