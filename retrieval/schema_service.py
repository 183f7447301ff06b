"""
Schema 召回服务

根据用户问题召回相关的表文档，根据关键词召回相关的列文档。
"""
from typing import Optional

from langchain_core.documents import Document

from config import settings
from utils.logger import get_logger
from .vector_store import SchemaVectorStore

logger = get_logger("retrieval.schema")


class SchemaService:
    """
    Schema 召回服务
    
    表文档按完整问题检索；列文档按关键词逐个检索，
    每个关键词对应一组结果，顺序与关键词顺序一致。
    """
    
    def __init__(
        self,
        vector_store: Optional[SchemaVectorStore] = None,
        table_top_k: Optional[int] = None,
        column_top_k: Optional[int] = None,
    ):
        self._vector_store = vector_store
        self.table_top_k = table_top_k or settings.table_top_k
        self.column_top_k = column_top_k or settings.column_top_k
    
    @property
    def vector_store(self) -> SchemaVectorStore:
        """懒加载向量存储。"""
        if self._vector_store is None:
            self._vector_store = SchemaVectorStore()
        return self._vector_store
    
    def get_table_documents(self, query: str) -> list[Document]:
        """
        召回与问题相关的表文档。
        
        Args:
            query: 用户问题
            
        Returns:
            表文档列表
        """
        documents = self.vector_store.search(query, vector_type="table", limit=self.table_top_k)
        logger.debug(f"表文档召回 {len(documents)} 条: {query}")
        return documents
    
    def get_column_documents_by_keywords(self, keywords: list[str]) -> list[list[Document]]:
        """
        按关键词逐个召回列文档。
        
        Args:
            keywords: 关键词列表
            
        Returns:
            与关键词一一对应的列文档分组
        """
        groups = []
        for keyword in keywords:
            documents = self.vector_store.search(keyword, vector_type="column", limit=self.column_top_k)
            logger.debug(f"关键词 '{keyword}' 召回列文档 {len(documents)} 条")
            groups.append(documents)
        return groups
