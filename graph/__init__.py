"""
LangGraph 工作流模块

提供基于 LangGraph 的 NL2SQL 前置阶段编排。
"""
from .state import Nl2SqlState, StateKeyError, SqlValidation, ValidSql, InvalidSql
from .progress import ProgressEvent, ProgressReporter, ProgressClosedError
from .nodes import (
    keyword_extract_node,
    schema_recall_node,
    sql_validate_node,
)
from .builder import build_nl2sql_graph, get_nl2sql_graph
from .streaming import PipelineEvent, stream_pipeline, run_pipeline

__all__ = [
    "Nl2SqlState",
    "StateKeyError",
    "SqlValidation",
    "ValidSql",
    "InvalidSql",
    "ProgressEvent",
    "ProgressReporter",
    "ProgressClosedError",
    "keyword_extract_node",
    "schema_recall_node",
    "sql_validate_node",
    "build_nl2sql_graph",
    "get_nl2sql_graph",
    "PipelineEvent",
    "stream_pipeline",
    "run_pipeline",
]
