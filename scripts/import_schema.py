"""
Schema 导入脚本

从 MySQL INFORMATION_SCHEMA 读取表和列的元数据，连同业务证据一起写入 Qdrant，
供关键词抽取与 Schema 召回节点检索。

用法:
    python -m scripts.import_schema --recreate
    python -m scripts.import_schema --evidence-file evidences.json
"""
import argparse
import json
from collections import OrderedDict
from pathlib import Path
from typing import Any, Optional

from langchain_core.documents import Document

from database import MySQLConnector
from retrieval import SchemaVectorStore
from utils.logger import setup_logger, quiet_third_party

logger = setup_logger("nl2sql.scripts")


def build_table_documents(columns: list[dict[str, Any]]) -> list[Document]:
    """
    按表聚合列元数据，每张表生成一个文档。

    Args:
        columns: INFORMATION_SCHEMA 列信息

    Returns:
        表文档列表（按表名顺序）
    """
    tables: "OrderedDict[str, dict[str, Any]]" = OrderedDict()
    for col in columns:
        table = tables.setdefault(col["TABLE_NAME"], {
            "comment": col.get("TABLE_COMMENT") or "",
            "columns": [],
            "primary_key": [],
        })
        table["columns"].append(col["COLUMN_NAME"])
        if col.get("COLUMN_KEY") == "PRI":
            table["primary_key"].append(col["COLUMN_NAME"])

    documents = []
    for name, table in tables.items():
        lines = [f"Table: {name}"]
        if table["comment"]:
            lines.append(f"Business Meaning: {table['comment']}")
        if table["primary_key"]:
            lines.append(f"Primary Key: {', '.join(table['primary_key'])}")
        lines.append(f"Columns: {', '.join(table['columns'])}")
        documents.append(Document(
            page_content="\n".join(lines),
            metadata={
                "vector_type": "table",
                "table_name": name,
                "table_comment": table["comment"],
                "primary_key": table["primary_key"],
            },
        ))
    return documents


def build_column_documents(columns: list[dict[str, Any]]) -> list[Document]:
    """每个列生成一个文档。"""
    documents = []
    for col in columns:
        comment = col.get("COLUMN_COMMENT") or ""
        text = f"{col['TABLE_NAME']}.{col['COLUMN_NAME']} ({col['DATA_TYPE']})"
        if comment:
            text += f": {comment}"
        documents.append(Document(
            page_content=text,
            metadata={
                "vector_type": "column",
                "table_name": col["TABLE_NAME"],
                "column_name": col["COLUMN_NAME"],
                "data_type": col["DATA_TYPE"],
                "column_comment": comment,
                "nullable": col.get("IS_NULLABLE") == "YES",
                "primary": col.get("COLUMN_KEY") == "PRI",
            },
        ))
    return documents


def load_evidence_documents(path: str) -> list[Document]:
    """
    从 JSON 文件读取业务证据。

    文件内容为字符串数组，例如 ["GMV 指订单实付金额之和", ...]
    """
    items = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(items, list) or not all(isinstance(i, str) for i in items):
        raise ValueError(f"证据文件格式错误，应为字符串数组: {path}")
    return [
        Document(page_content=item, metadata={"vector_type": "evidence"})
        for item in items if item.strip()
    ]


def import_schema(
    recreate: bool = False,
    evidence_file: Optional[str] = None,
    database: Optional[str] = None,
) -> int:
    """
    导入 Schema 与证据到向量库。

    Returns:
        写入的文档总数
    """
    with MySQLConnector(database=database) as conn:
        columns = conn.get_columns()
    logger.info(f"读取到 {len(columns)} 个列")

    documents = build_table_documents(columns) + build_column_documents(columns)
    if evidence_file:
        documents += load_evidence_documents(evidence_file)

    store = SchemaVectorStore()
    store.create_collection(delete_existing=recreate)
    total = store.upsert_documents(documents)

    info = store.get_collection_info()
    logger.info(f"集合 {info['name']} 当前共 {info['points_count']} 条文档 (status={info['status']})")
    return total


def main():
    """命令行入口。"""
    parser = argparse.ArgumentParser(description="导入数据库 Schema 与业务证据到 Qdrant")
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="删除并重建集合"
    )
    parser.add_argument(
        "--evidence-file",
        default=None,
        help="业务证据 JSON 文件（字符串数组）"
    )
    parser.add_argument(
        "--database",
        default=None,
        help="MySQL 数据库名（默认使用 MYSQL_DATABASE）"
    )

    args = parser.parse_args()
    quiet_third_party()

    total = import_schema(
        recreate=args.recreate,
        evidence_file=args.evidence_file,
        database=args.database,
    )
    logger.info(f"导入完成，共 {total} 条文档")


if __name__ == "__main__":
    main()
