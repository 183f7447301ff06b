"""
Tests for the extraction and schema services and the Qdrant store.

运行测试: python -m pytest tests/test_services.py -v
"""
import pytest
from types import SimpleNamespace
from unittest.mock import MagicMock

from langchain_core.documents import Document
from langchain_core.runnables import RunnableLambda

from qdrant_client import QdrantClient

from config import settings
from extraction import Nl2SqlService, KeywordExtraction
from retrieval import SchemaService, SchemaVectorStore
from retrieval.vector_store import point_id


def make_store(points=None):
    client = MagicMock()
    client.query_points.return_value.points = points or []
    embeddings = MagicMock()
    embeddings.embed_query.return_value = [0.1, 0.2]
    embeddings.embed_documents.side_effect = lambda texts: [[0.1, 0.2] for _ in texts]
    return SchemaVectorStore(collection_name="test_schema", client=client, embeddings=embeddings), client


class TestSchemaVectorStore:
    """Test cases for SchemaVectorStore."""

    def test_search_filters_by_vector_type(self):
        store, client = make_store([
            SimpleNamespace(id=7, score=0.91, payload={
                "page_content": "Table: orders", "vector_type": "table", "table_name": "orders",
            }),
        ])

        docs = store.search("total sales", vector_type="table", limit=3)

        kwargs = client.query_points.call_args.kwargs
        assert kwargs["collection_name"] == "test_schema"
        assert kwargs["limit"] == 3
        assert kwargs["query_filter"].must[0].key == "vector_type"
        assert kwargs["query_filter"].must[0].match.value == "table"

        assert len(docs) == 1
        assert docs[0].page_content == "Table: orders"
        assert docs[0].id == "7"
        assert docs[0].metadata["table_name"] == "orders"
        assert docs[0].metadata["_score"] == 0.91
        assert "page_content" not in docs[0].metadata

    def test_upsert_requires_vector_type(self):
        store, _ = make_store()

        with pytest.raises(ValueError):
            store.upsert_documents([Document(page_content="no type")])

    def test_upsert_writes_payload(self):
        store, client = make_store()
        docs = [Document(page_content="GMV 指实付金额", metadata={"vector_type": "evidence"})]

        assert store.upsert_documents(docs) == 1
        point = client.upsert.call_args.kwargs["points"][0]
        assert point.payload == {"page_content": "GMV 指实付金额", "vector_type": "evidence"}

    def test_create_collection_skips_existing(self):
        store, client = make_store()
        client.get_collections.return_value.collections = [SimpleNamespace(name="test_schema")]

        store.create_collection()

        client.create_collection.assert_not_called()
        client.delete_collection.assert_not_called()


class TestSchemaService:
    """Test cases for SchemaService."""

    def test_table_documents(self):
        store = MagicMock()
        store.search.return_value = [Document(page_content="orders")]
        service = SchemaService(vector_store=store, table_top_k=4, column_top_k=2)

        docs = service.get_table_documents("total sales")

        store.search.assert_called_once_with("total sales", vector_type="table", limit=4)
        assert docs[0].page_content == "orders"

    def test_column_groups_follow_keyword_order(self):
        store = MagicMock()
        store.search.side_effect = lambda query, vector_type, limit: [
            Document(page_content=f"{query}_col")
        ]
        service = SchemaService(vector_store=store, table_top_k=4, column_top_k=2)

        groups = service.get_column_documents_by_keywords(["sales", "total", "region"])

        assert [g[0].page_content for g in groups] == ["sales_col", "total_col", "region_col"]
        assert all(c.kwargs["vector_type"] == "column" for c in store.search.call_args_list)

    def test_no_keywords(self):
        store = MagicMock()
        service = SchemaService(vector_store=store)

        assert service.get_column_documents_by_keywords([]) == []
        store.search.assert_not_called()


class TestNl2SqlService:
    """Test cases for Nl2SqlService."""

    def test_extract_evidences(self):
        store = MagicMock()
        store.search.return_value = [
            Document(page_content="sales table exists"),
            Document(page_content="GMV 指实付金额"),
        ]
        service = Nl2SqlService(
            vector_store=store, llm=RunnableLambda(lambda _: KeywordExtraction()), evidence_top_k=2
        )

        assert service.extract_evidences("show me total sales") == ["sales table exists", "GMV 指实付金额"]
        store.search.assert_called_once_with("show me total sales", vector_type="evidence", limit=2)

    def test_extract_keywords(self):
        prompts = []

        def fake_llm(prompt_value):
            prompts.append(prompt_value.to_string())
            return KeywordExtraction(keywords=["sales", " total ", ""])

        service = Nl2SqlService(vector_store=MagicMock(), llm=RunnableLambda(fake_llm))

        keywords = service.extract_keywords("show me total sales", ["sales table exists"])

        assert keywords == ["sales", "total"]
        assert "show me total sales" in prompts[0]
        assert "- sales table exists" in prompts[0]

    def test_extract_keywords_without_evidences(self):
        prompts = []

        def fake_llm(prompt_value):
            prompts.append(prompt_value.to_string())
            return KeywordExtraction()

        service = Nl2SqlService(vector_store=MagicMock(), llm=RunnableLambda(fake_llm))

        assert service.extract_keywords("你好", []) == []
        assert "## 业务证据\n无" in prompts[0]

    def test_extract_keywords_without_structured_result(self):
        """A missing structured result yields an empty keyword list."""
        service = Nl2SqlService(vector_store=MagicMock(), llm=RunnableLambda(lambda _: None))

        assert service.extract_keywords("show me total sales", ["sales table exists"]) == []


class TestPointIds:
    """Re-importing the same documents overwrites existing points."""

    def test_point_id_is_stable(self):
        table = Document(page_content="Table: orders", metadata={"vector_type": "table", "table_name": "orders"})
        renamed = Document(page_content="Table: orders\nBusiness Meaning: 订单", metadata={
            "vector_type": "table", "table_name": "orders",
        })
        column = Document(page_content="orders.amount", metadata={
            "vector_type": "column", "table_name": "orders", "column_name": "amount",
        })
        evidence = Document(page_content="orders", metadata={"vector_type": "evidence"})

        assert point_id(table) == point_id(renamed)
        assert len({point_id(table), point_id(column), point_id(evidence)}) == 3

    def test_upsert_twice_uses_same_ids(self):
        store, client = make_store()
        docs = [
            Document(page_content="Table: orders", metadata={"vector_type": "table", "table_name": "orders"}),
            Document(page_content="GMV 指实付金额", metadata={"vector_type": "evidence"}),
        ]

        store.upsert_documents(docs)
        store.upsert_documents(docs)

        first, second = [c.kwargs["points"] for c in client.upsert.call_args_list]
        assert [p.id for p in first] == [p.id for p in second]

    def test_reimport_keeps_count_in_local_qdrant(self):
        dim = settings.embedding_dim
        embeddings = MagicMock()
        embeddings.embed_query.return_value = [1.0] + [0.0] * (dim - 1)
        embeddings.embed_documents.side_effect = lambda texts: [[1.0] + [0.0] * (dim - 1) for _ in texts]
        store = SchemaVectorStore(
            collection_name="reimport", client=QdrantClient(":memory:"), embeddings=embeddings
        )
        store.create_collection()
        docs = [
            Document(page_content="Table: orders", metadata={"vector_type": "table", "table_name": "orders"}),
            Document(page_content="orders.amount", metadata={
                "vector_type": "column", "table_name": "orders", "column_name": "amount",
            }),
        ]

        store.upsert_documents(docs)
        store.upsert_documents(docs)

        assert store.get_collection_info()["points_count"] == 2
        hits = SchemaService(vector_store=store, table_top_k=5).get_table_documents("orders")
        assert [d.metadata["table_name"] for d in hits] == ["orders"]
