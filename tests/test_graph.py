"""
Tests for the compiled LangGraph pipeline and its streaming adapter.

运行测试: python -m pytest tests/test_graph.py -v
"""
import pytest
from unittest.mock import patch, MagicMock

from langchain_core.documents import Document

from database import SqlExecutionError
from graph import build_nl2sql_graph, run_pipeline, stream_pipeline
from graph.constants import (
    INPUT_KEY,
    KEYWORD_EXTRACT_NODE,
    SCHEMA_RECALL_NODE,
    SQL_VALIDATE_NODE,
    KEYWORD_EXTRACT_NODE_OUTPUT,
    EVIDENCES,
    RESULT,
    TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT,
    COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT,
    SQL_GENERATE_OUTPUT,
    SQL_VALIDATE_NODE_OUTPUT,
    SQL_VALIDATE_EXCEPTION_OUTPUT,
)


@pytest.fixture
def services():
    nl2sql_service = MagicMock()
    nl2sql_service.extract_evidences.return_value = ["sales table exists"]
    nl2sql_service.extract_keywords.return_value = ["sales", "total"]

    schema_service = MagicMock()
    schema_service.get_table_documents.return_value = [
        Document(page_content=f"table_{i}") for i in range(3)
    ]
    schema_service.get_column_documents_by_keywords.side_effect = lambda keywords: [
        [Document(page_content=f"{kw}.amount")] for kw in keywords
    ]

    db_accessor = MagicMock()

    with patch("graph.nodes.get_nl2sql_service", return_value=nl2sql_service), \
            patch("graph.nodes.get_schema_service", return_value=schema_service), \
            patch("graph.nodes.get_db_accessor", return_value=db_accessor), \
            patch("graph.nodes.get_db_config", return_value=MagicMock()):
        yield nl2sql_service, schema_service, db_accessor


class TestPipeline:
    """End-to-end runs of the compiled graph with mocked services."""

    def test_run_pipeline_merges_results(self, services):
        """Keyword output flows into schema recall through the shared state."""
        nl2sql_service, schema_service, _ = services
        graph = build_nl2sql_graph(include_sql_validate=False)

        result = run_pipeline(graph, {INPUT_KEY: "show me total sales"})

        assert result[KEYWORD_EXTRACT_NODE_OUTPUT] == ["sales", "total"]
        assert result[EVIDENCES] == ["sales table exists"]
        assert result[RESULT] == ["sales", "total"]
        assert len(result[TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT]) == 3
        assert [g[0].page_content for g in result[COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT]] == [
            "sales.amount", "total.amount"
        ]
        assert SQL_VALIDATE_NODE_OUTPUT not in result
        schema_service.get_column_documents_by_keywords.assert_called_once_with(["sales", "total"])

    def test_single_execution(self, services):
        """Progress and result come from one run, so each collaborator is called once."""
        nl2sql_service, schema_service, _ = services
        graph = build_nl2sql_graph(include_sql_validate=False)

        run_pipeline(graph, {INPUT_KEY: "show me total sales"}, on_progress=lambda _: None)

        assert nl2sql_service.extract_evidences.call_count == 1
        assert nl2sql_service.extract_keywords.call_count == 1
        assert schema_service.get_table_documents.call_count == 1

    def test_progress_forwarded_per_node(self, services):
        """Each node's progress starts after the previous node completed."""
        graph = build_nl2sql_graph(include_sql_validate=False)
        events = []

        run_pipeline(graph, {INPUT_KEY: "show me total sales"}, on_progress=events.append)

        nodes = [e["node"] for e in events]
        first_recall = nodes.index(SCHEMA_RECALL_NODE)
        assert set(nodes[:first_recall]) == {KEYWORD_EXTRACT_NODE}
        assert set(nodes[first_recall:]) == {SCHEMA_RECALL_NODE}
        assert events[first_recall - 1]["type"] == "complete"
        assert events[-1]["type"] == "complete"

    def test_stream_yields_updates_after_progress(self, services):
        graph = build_nl2sql_graph(include_sql_validate=False)

        events = list(stream_pipeline(graph, {INPUT_KEY: "show me total sales"}))

        updates = [e for e in events if e["kind"] == "update"]
        assert [e["node"] for e in updates] == [KEYWORD_EXTRACT_NODE, SCHEMA_RECALL_NODE]
        keyword_update = events.index(updates[0])
        assert all(e["kind"] == "progress" for e in events[:keyword_update])

    @pytest.mark.filterwarnings("ignore::DeprecationWarning")
    def test_sql_validate_failure_is_in_band(self, services):
        """A failing SQL completes the run with a failure result instead of raising."""
        _, _, db_accessor = services
        db_accessor.execute_sql_and_return_object.side_effect = SqlExecutionError("table not found")
        graph = build_nl2sql_graph(include_sql_validate=True)

        result = run_pipeline(graph, {
            INPUT_KEY: "show me total sales",
            SQL_GENERATE_OUTPUT: "SELECT * FROM nonexistent",
        })

        assert result[SQL_VALIDATE_NODE_OUTPUT] is False
        assert result[SQL_VALIDATE_EXCEPTION_OUTPUT] == "table not found"

    @pytest.mark.filterwarnings("ignore::DeprecationWarning")
    def test_sql_validate_node_wired_when_enabled(self, services):
        graph = build_nl2sql_graph(include_sql_validate=True)

        assert SQL_VALIDATE_NODE in graph.get_graph().nodes
        result = run_pipeline(graph, {INPUT_KEY: "q", SQL_GENERATE_OUTPUT: "SELECT 1"})
        assert result[SQL_VALIDATE_NODE_OUTPUT] is True

    def test_sql_validate_node_absent_by_default(self, services):
        with patch("graph.builder.settings") as mock_settings:
            mock_settings.sql_validate_enabled = False
            graph = build_nl2sql_graph()

        assert SQL_VALIDATE_NODE not in graph.get_graph().nodes

    def test_extraction_failure_aborts_run(self, services):
        nl2sql_service, schema_service, _ = services
        nl2sql_service.extract_evidences.side_effect = RuntimeError("vector store unavailable")
        graph = build_nl2sql_graph(include_sql_validate=False)

        with pytest.raises(RuntimeError, match="vector store unavailable"):
            run_pipeline(graph, {INPUT_KEY: "show me total sales"})
        schema_service.get_table_documents.assert_not_called()
