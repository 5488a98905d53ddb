"""Elasticsearch index client adapter."""

from lantern.adapters.elasticsearch.index_client import (
    ElasticsearchIndexClient,
    document_id_for,
)

__all__ = ["ElasticsearchIndexClient", "document_id_for"]
