"""Unit tests for ElasticsearchIndexClient with a mocked Elasticsearch client."""

from unittest.mock import MagicMock, patch

import pytest
from elasticsearch import ApiError, ConnectionTimeout, NotFoundError

from lantern.adapters.elasticsearch.index_client import (
    ElasticsearchIndexClient,
    document_id_for,
)
from lantern.core.sync.document_builder import DocumentBuilder
from lantern.domain.entities import IndexResponse
from lantern.ports.index import IndexClientError
from tests.conftest import make_item
from tests.helpers.fakes import FakeContentAccessor


def _api_error(cls, status: int):
    meta = MagicMock()
    meta.status = status
    return cls(message="backend said no", meta=meta, body={})


@pytest.fixture
def es() -> MagicMock:
    client = MagicMock()
    client.index.return_value = {"_id": "2-42", "result": "created"}
    return client


@pytest.fixture
def client(es: MagicMock) -> ElasticsearchIndexClient:
    return ElasticsearchIndexClient(hosts=["http://es:9200"], index_prefix="site", client=es)


@pytest.fixture
def document():
    content = FakeContentAccessor()
    item = content.add_item(make_item(42, tenant_id=2))
    return DocumentBuilder(content).build(item)


class TestIndexNames:
    def test_tenant_and_global_names(self, client) -> None:
        assert client.index_name(3, tenant_id=1) == "site-3"
        assert client.index_name(0, tenant_id=1) == "site-global"
        assert client.index_name(None, tenant_id=5) == "site-5"

    def test_document_id_is_deterministic(self, document) -> None:
        assert document_id_for(document) == "2-42"


class TestIndexDocument:
    def test_writes_payload_with_deterministic_id(self, client, es, document) -> None:
        response = client.index_document(document, target_index_id=0)

        assert response == IndexResponse(document_id="2-42")
        es.index.assert_called_once_with(
            index="site-global", id="2-42", document=document.to_payload()
        )

    def test_timeout_becomes_timeout_error(self, client, es, document) -> None:
        es.index.side_effect = ConnectionTimeout("timed out")

        with pytest.raises(TimeoutError):
            client.index_document(document, target_index_id=2)

    def test_api_error_becomes_index_client_error(self, client, es, document) -> None:
        es.index.side_effect = _api_error(ApiError, 500)

        with pytest.raises(IndexClientError, match="site-2"):
            client.index_document(document, target_index_id=2)


class TestDeleteDocument:
    def test_delete_uses_target_index(self, client, es) -> None:
        assert client.delete_document("2-42", target_index_id=2) is True
        es.delete.assert_called_once_with(index="site-2", id="2-42")

    def test_source_hint_wins(self, client, es) -> None:
        client.delete_document("2-42", source_index_hint="legacy", target_index_id=2)
        es.delete.assert_called_once_with(index="legacy", id="2-42")

    def test_tenant_is_derived_from_document_id(self, client, es) -> None:
        client.delete_document("7-3")
        es.delete.assert_called_once_with(index="site-7", id="7-3")

    def test_foreign_document_id_without_target_fails(self, client) -> None:
        with pytest.raises(IndexClientError):
            client.delete_document("es1")

    def test_missing_document_is_not_an_error(self, client, es) -> None:
        es.delete.side_effect = _api_error(NotFoundError, 404)

        assert client.delete_document("2-42", target_index_id=2) is None

    def test_api_error_becomes_index_client_error(self, client, es) -> None:
        es.delete.side_effect = _api_error(ApiError, 503)

        with pytest.raises(IndexClientError):
            client.delete_document("2-42", target_index_id=2)


class TestConnection:
    def test_requests_are_bounded_without_timeout_retries(self) -> None:
        with patch("lantern.adapters.elasticsearch.index_client.Elasticsearch") as es_cls:
            ElasticsearchIndexClient(hosts=["http://es:9200"], request_timeout=2.5)

        es_cls.assert_called_once_with(
            ["http://es:9200"], request_timeout=2.5, retry_on_timeout=False
        )

    def test_close_closes_transport(self, client, es) -> None:
        client.close()

        es.close.assert_called_once_with()
