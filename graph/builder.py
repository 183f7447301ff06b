"""
LangGraph 图构建器

构建 NL2SQL 前置阶段（关键词抽取 → Schema 召回 → SQL 校验）的 StateGraph。
"""
from typing import Optional

from langgraph.graph import StateGraph, START, END

from config import settings
from .constants import KEYWORD_EXTRACT_NODE, SCHEMA_RECALL_NODE, SQL_VALIDATE_NODE
from .state import Nl2SqlState
from .nodes import keyword_extract_node, schema_recall_node, sql_validate_node


def build_nl2sql_graph(include_sql_validate: Optional[bool] = None, checkpointer=None):
    """
    构建 NL2SQL 工作流图。
    
    工作流:
        START → keyword_extract → schema_recall → [sql_validate] → END
    
    Args:
        include_sql_validate: 是否接入已废弃的 SQL 校验节点，默认读取 SQL_VALIDATE_ENABLED
        checkpointer: 可选的 checkpointer
    
    Returns:
        编译后的 LangGraph 工作流
    """
    if include_sql_validate is None:
        include_sql_validate = settings.sql_validate_enabled
    
    builder = StateGraph(Nl2SqlState)
    
    # 添加节点
    builder.add_node(KEYWORD_EXTRACT_NODE, keyword_extract_node)
    builder.add_node(SCHEMA_RECALL_NODE, schema_recall_node)
    
    # 顺序执行链
    builder.add_edge(START, KEYWORD_EXTRACT_NODE)
    builder.add_edge(KEYWORD_EXTRACT_NODE, SCHEMA_RECALL_NODE)
    
    if include_sql_validate:
        builder.add_node(SQL_VALIDATE_NODE, sql_validate_node)
        builder.add_edge(SCHEMA_RECALL_NODE, SQL_VALIDATE_NODE)
        builder.add_edge(SQL_VALIDATE_NODE, END)
    else:
        builder.add_edge(SCHEMA_RECALL_NODE, END)
    
    return builder.compile(checkpointer=checkpointer)


# 全局单例
_graph_instance = None


def get_nl2sql_graph():
    """获取 NL2SQL 工作流图的单例实例。"""
    global _graph_instance
    if _graph_instance is None:
        _graph_instance = build_nl2sql_graph()
    return _graph_instance
