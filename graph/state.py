"""
LangGraph 状态定义

定义 NL2SQL 工作流的状态类型及读取辅助函数。
"""
from typing import Any, Literal, Optional, TypedDict, Union

from langchain_core.documents import Document
from pydantic import BaseModel


class StateKeyError(KeyError):
    """必需的状态键不存在。"""


class Nl2SqlState(TypedDict, total=False):
    """
    NL2SQL 工作流状态。
    
    每个节点只返回自己产出的字段，由 LangGraph 合并到状态中（同名字段后写覆盖）。
    下游节点不能假设上游字段已存在。
    """
    # === 输入 ===
    input: str  # 用户原始问题
    query_rewrite_output: Optional[str]  # 改写后的问题
    
    # === 关键词抽取 ===
    keyword_extract_output: list[str]  # 关键词
    evidences: list[str]  # 业务证据
    result: Any  # 最近一个节点的通用结果
    
    # === Schema 召回 ===
    table_documents_for_schema_output: list[Document]
    column_documents_by_keywords_output: list[list[Document]]  # 每个关键词一组
    
    # === SQL 生成与校验 ===
    sql_generate_output: Optional[str]
    sql_validate_output: bool
    sql_validate_exception_output: str


_MISSING = object()


def get_value(state: Nl2SqlState, key: str, default: Any = _MISSING) -> Any:
    """
    读取状态值。
    
    值为 None 视同不存在；未提供默认值时抛出 StateKeyError。
    """
    value = state.get(key)
    if value is None:
        if default is _MISSING:
            raise StateKeyError(f"状态中缺少必需字段: {key}")
        return default
    return value


def get_string_value(state: Nl2SqlState, key: str, default: Any = _MISSING) -> str:
    """读取字符串状态值。"""
    return get_value(state, key, default)


def get_list_value(state: Nl2SqlState, key: str, default: Any = _MISSING) -> list:
    """读取列表状态值，返回副本。"""
    return list(get_value(state, key, default))


class ValidSql(BaseModel):
    """SQL 校验通过。"""
    kind: Literal["valid"] = "valid"


class InvalidSql(BaseModel):
    """SQL 校验失败。"""
    kind: Literal["invalid"] = "invalid"
    message: str


SqlValidation = Union[ValidSql, InvalidSql]
