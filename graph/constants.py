"""
工作流状态键与节点名称

所有节点通过这些常量读写共享状态，取值必须在节点之间保持一致。
"""

# === 输入 ===
INPUT_KEY = "input"
QUERY_REWRITE_NODE_OUTPUT = "query_rewrite_output"

# === 关键词抽取节点输出 ===
KEYWORD_EXTRACT_NODE_OUTPUT = "keyword_extract_output"
EVIDENCES = "evidences"
RESULT = "result"

# === Schema 召回节点输出 ===
TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT = "table_documents_for_schema_output"
COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT = "column_documents_by_keywords_output"

# === SQL 生成与校验 ===
SQL_GENERATE_OUTPUT = "sql_generate_output"
SQL_VALIDATE_NODE_OUTPUT = "sql_validate_output"
SQL_VALIDATE_EXCEPTION_OUTPUT = "sql_validate_exception_output"

# === 节点名称 ===
KEYWORD_EXTRACT_NODE = "keyword_extract"
SCHEMA_RECALL_NODE = "schema_recall"
SQL_VALIDATE_NODE = "sql_validate"
