"""
证据与关键词抽取服务

证据来自向量库中的业务知识文档，关键词由 LLM 结合问题与证据抽取。
"""
from typing import Optional
from pydantic import BaseModel, Field
from langchain_core.prompts import ChatPromptTemplate

from config import settings
from llm.client import create_model
from retrieval import SchemaVectorStore
from utils.logger import get_logger
from .prompts import KEYWORD_EXTRACTION_SYSTEM_PROMPT, KEYWORD_EXTRACTION_USER_PROMPT

logger = get_logger("extraction")


class KeywordExtraction(BaseModel):
    """LLM 抽取出的关键词。"""
    keywords: list[str] = Field(default_factory=list, description="按出现顺序排列的关键词")


class Nl2SqlService:
    """
    证据与关键词抽取服务
    
    两个方法均为同步调用，对相同输入返回相同结果，异常直接向上抛出。
    """
    
    def __init__(
        self,
        vector_store: Optional[SchemaVectorStore] = None,
        llm=None,
        evidence_top_k: Optional[int] = None,
    ):
        """
        初始化抽取服务。
        
        Args:
            vector_store: 证据所在的向量存储（默认懒加载）
            llm: 已绑定结构化输出的模型（默认使用 create_model）
            evidence_top_k: 证据召回数量
        """
        self._vector_store = vector_store
        self.evidence_top_k = evidence_top_k or settings.evidence_top_k
        
        if llm is None:
            llm = create_model(temperature=0).with_structured_output(KeywordExtraction)
        self.llm = llm
        
        self.prompt = ChatPromptTemplate.from_messages([
            ("system", KEYWORD_EXTRACTION_SYSTEM_PROMPT),
            ("human", KEYWORD_EXTRACTION_USER_PROMPT),
        ])
        self.chain = self.prompt | self.llm
    
    @property
    def vector_store(self) -> SchemaVectorStore:
        """懒加载向量存储。"""
        if self._vector_store is None:
            self._vector_store = SchemaVectorStore()
        return self._vector_store
    
    def extract_evidences(self, query: str) -> list[str]:
        """
        召回与问题相关的业务证据。
        
        Args:
            query: 用户问题
            
        Returns:
            证据文本列表，顺序与检索结果一致
        """
        documents = self.vector_store.search(query, vector_type="evidence", limit=self.evidence_top_k)
        return [doc.page_content for doc in documents]
    
    def extract_keywords(self, query: str, evidences: list[str]) -> list[str]:
        """
        结合证据从问题中抽取关键词。
        
        Args:
            query: 用户问题
            evidences: 业务证据列表
            
        Returns:
            关键词列表
        """
        evidence_text = "\n".join(f"- {e}" for e in evidences) if evidences else "无"
        result = self.chain.invoke({"question": query, "evidences": evidence_text})

        # 模型未调用结构化输出工具时返回 None
        if result is None:
            logger.warning(f"关键词抽取未返回结构化结果: {query}")
            return []

        keywords = [k.strip() for k in result.keywords if k and k.strip()]
        logger.debug(f"关键词抽取: {query} -> {keywords}")
        return keywords
