"""
检索模块

提供基于 Qdrant 的 Schema 与证据文档语义检索。
"""
from .vector_store import SchemaVectorStore
from .schema_service import SchemaService

__all__ = ["SchemaVectorStore", "SchemaService"]
