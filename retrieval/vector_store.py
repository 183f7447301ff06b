"""
Qdrant 向量存储

存储 Schema 文档（表、列）与业务证据文档，用于语义召回。
所有文档位于同一个集合中，通过 payload 中的 vector_type 字段区分。
"""
import uuid
from typing import Any, Literal, Optional

from langchain_core.documents import Document
from qdrant_client import QdrantClient
from qdrant_client.models import (
    Distance,
    FieldCondition,
    Filter,
    MatchValue,
    PointStruct,
    VectorParams,
)

from config import settings
from llm.client import create_embedding_model
from utils.logger import get_logger

logger = get_logger("retrieval")

VectorType = Literal["table", "column", "evidence"]

# payload 中保存文档正文的字段
CONTENT_KEY = "page_content"
VECTOR_TYPE_KEY = "vector_type"

# 批量写入大小
UPSERT_BATCH_SIZE = 64

# 生成确定性 point id 的命名空间
POINT_ID_NAMESPACE = uuid.UUID("6f1c9f2e-3b7a-5d4e-9a21-0c8e4b7d2f15")


def point_id(doc: Document) -> str:
    """
    根据文档内容生成确定性的 point id，重复导入时覆盖而不是新增。
    
    表文档按表名、列文档按 表名.列名、证据文档按正文生成。
    """
    vector_type = doc.metadata.get(VECTOR_TYPE_KEY)
    table_name = doc.metadata.get("table_name")
    column_name = doc.metadata.get("column_name")
    
    if vector_type == "column" and table_name and column_name:
        key = f"column:{table_name}.{column_name}"
    elif vector_type == "table" and table_name:
        key = f"table:{table_name}"
    else:
        key = f"{vector_type}:{doc.page_content}"
    return str(uuid.uuid5(POINT_ID_NAMESPACE, key))


class SchemaVectorStore:
    """
    Qdrant 向量存储类，用于 Schema 与证据文档的语义检索。
    """
    
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        collection_name: Optional[str] = None,
        client: Optional[QdrantClient] = None,
        embeddings=None,
    ):
        """
        初始化 Qdrant 连接和 Embedding 模型。
        
        Args:
            host: Qdrant主机地址
            port: Qdrant端口
            collection_name: 集合名称
            client: 已创建的 QdrantClient（可选）
            embeddings: 已创建的 Embeddings 实例（可选）
        """
        self.host = host or settings.qdrant_host
        self.port = port or settings.qdrant_port
        self.collection_name = collection_name or settings.qdrant_collection
        self._embedding_dim = settings.embedding_dim
        
        if client is None:
            logger.debug(f"连接Qdrant: {self.host}:{self.port}")
            client = QdrantClient(host=self.host, port=self.port)
        self._client = client
        self._embeddings = embeddings or create_embedding_model()
    
    def create_collection(self, delete_existing: bool = False) -> None:
        """
        创建 Qdrant 集合。
        
        Args:
            delete_existing: 是否删除已存在的集合
        """
        collections = self._client.get_collections().collections
        exists = any(c.name == self.collection_name for c in collections)
        
        if exists:
            if delete_existing:
                logger.info(f"删除已存在的集合: {self.collection_name}")
                self._client.delete_collection(self.collection_name)
            else:
                logger.info(f"集合已存在: {self.collection_name}")
                return
        
        logger.info(f"创建集合: {self.collection_name}")
        self._client.create_collection(
            collection_name=self.collection_name,
            vectors_config=VectorParams(
                size=self._embedding_dim,
                distance=Distance.COSINE,
            ),
        )
    
    def upsert_documents(self, documents: list[Document]) -> int:
        """
        批量写入文档。
        
        每个文档的 metadata 必须包含 vector_type。
        
        Args:
            documents: 文档列表
            
        Returns:
            写入的文档数量
        """
        total = 0
        for start in range(0, len(documents), UPSERT_BATCH_SIZE):
            batch = documents[start:start + UPSERT_BATCH_SIZE]
            vectors = self._embeddings.embed_documents([d.page_content for d in batch])
            points = []
            for doc, vector in zip(batch, vectors):
                if VECTOR_TYPE_KEY not in doc.metadata:
                    raise ValueError(f"文档缺少 {VECTOR_TYPE_KEY}: {doc.page_content[:50]}")
                points.append(PointStruct(
                    id=point_id(doc),
                    vector=vector,
                    payload={CONTENT_KEY: doc.page_content, **doc.metadata},
                ))
            self._client.upsert(collection_name=self.collection_name, points=points)
            total += len(points)
        
        logger.info(f"写入 {total} 条文档到 {self.collection_name}")
        return total
    
    def search(
        self,
        query: str,
        vector_type: VectorType,
        limit: int = 10,
    ) -> list[Document]:
        """
        按文档类型进行语义检索。
        
        Args:
            query: 查询文本
            vector_type: 文档类型（table / column / evidence）
            limit: 返回结果数量
            
        Returns:
            按相似度降序排列的文档列表
        """
        query_embedding = self._embeddings.embed_query(query)
        
        hits = self._client.query_points(
            collection_name=self.collection_name,
            query=query_embedding,
            query_filter=Filter(
                must=[
                    FieldCondition(
                        key=VECTOR_TYPE_KEY,
                        match=MatchValue(value=vector_type)
                    )
                ]
            ),
            limit=limit,
            with_payload=True,
        ).points
        
        return [self._to_document(hit.id, hit.payload, hit.score) for hit in hits]
    
    @staticmethod
    def _to_document(hit_id: Any, payload: dict[str, Any], score: float) -> Document:
        """将 Qdrant 命中结果转换为 Document。"""
        metadata = {k: v for k, v in payload.items() if k != CONTENT_KEY}
        metadata["_score"] = score
        return Document(
            id=str(hit_id),
            page_content=payload.get(CONTENT_KEY, ""),
            metadata=metadata,
        )
    
    def get_collection_info(self) -> dict[str, Any]:
        """获取集合信息。"""
        info = self._client.get_collection(self.collection_name)
        return {
            "name": self.collection_name,
            "points_count": info.points_count,
            "status": str(info.status),
        }
