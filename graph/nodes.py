"""
LangGraph 节点函数

实现 NL2SQL 工作流中 SQL 生成之前的各个节点：
关键词抽取、Schema 召回，以及已废弃的 SQL 语法校验。

每个节点只执行一次业务调用，执行过程中通过 writer 输出进度事件，
最终返回需要合并到状态中的字段。
"""
import logging
import warnings

from langgraph.types import StreamWriter

from .constants import (
    INPUT_KEY,
    QUERY_REWRITE_NODE_OUTPUT,
    KEYWORD_EXTRACT_NODE_OUTPUT,
    EVIDENCES,
    RESULT,
    TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT,
    COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT,
    SQL_GENERATE_OUTPUT,
    SQL_VALIDATE_NODE_OUTPUT,
    SQL_VALIDATE_EXCEPTION_OUTPUT,
    KEYWORD_EXTRACT_NODE,
    SCHEMA_RECALL_NODE,
    SQL_VALIDATE_NODE,
)
from .progress import ProgressReporter, join_items
from .state import (
    Nl2SqlState,
    SqlValidation,
    ValidSql,
    InvalidSql,
    get_string_value,
    get_list_value,
)

# 获取日志记录器
logger = logging.getLogger("nl2sql.nodes")


# ============== 日志辅助函数 ==============
def log_node_start(node_name: str, state: Nl2SqlState, show_fields: list[str] = None):
    """记录节点开始执行。"""
    logger.info(f"[{node_name}] 开始执行")

    # DEBUG 级别才显示详细输入
    if logger.isEnabledFor(logging.DEBUG) and show_fields:
        for field in show_fields:
            value = state.get(field)
            if value is not None:
                str_value = str(value)[:100] + "..." if len(str(value)) > 100 else str(value)
                logger.debug(f"  输入 {field}: {str_value}")


# ============== 单例缓存（避免重复初始化） ==============
_nl2sql_service = None
_schema_service = None
_db_accessor = None
_db_config = None


def get_nl2sql_service():
    """获取 Nl2SqlService 单例。"""
    global _nl2sql_service
    if _nl2sql_service is None:
        from extraction import Nl2SqlService
        logger.debug("首次初始化 Nl2SqlService...")
        _nl2sql_service = Nl2SqlService()
    return _nl2sql_service


def get_schema_service():
    """获取 SchemaService 单例。"""
    global _schema_service
    if _schema_service is None:
        from retrieval import SchemaService
        logger.debug("首次初始化 SchemaService...")
        _schema_service = SchemaService()
    return _schema_service


def get_db_accessor():
    """获取 DbAccessor 单例。"""
    global _db_accessor
    if _db_accessor is None:
        from database import DbAccessor
        _db_accessor = DbAccessor()
    return _db_accessor


def get_db_config():
    """获取当前配置的数据源。"""
    global _db_config
    if _db_config is None:
        from database import DbConfig
        _db_config = DbConfig.from_settings()
    return _db_config
# ======================================================


def keyword_extract_node(state: Nl2SqlState, writer: StreamWriter) -> dict:
    """关键词抽取节点 - 抽取证据与关键词，为 Schema 召回做准备"""
    log_node_start(KEYWORD_EXTRACT_NODE, state, [INPUT_KEY, QUERY_REWRITE_NODE_OUTPUT])
    progress = ProgressReporter(KEYWORD_EXTRACT_NODE, writer)

    # 优先使用改写后的问题，否则使用原始输入
    query = state.get(QUERY_REWRITE_NODE_OUTPUT) or get_string_value(state, INPUT_KEY)
    service = get_nl2sql_service()

    progress.status("开始提取关键词...")

    # 1. 提取证据
    progress.status("正在提取证据...")
    evidences = list(service.extract_evidences(query))
    progress.status(f"提取的证据: {join_items(evidences)}")
    logger.info(f"[{KEYWORD_EXTRACT_NODE}] 提取结果 - 证据: {evidences}")

    # 2. 结合证据提取关键词
    progress.status("正在提取关键词...")
    keywords = list(service.extract_keywords(query, evidences))
    progress.status(f"提取的关键词: {join_items(keywords)}")
    logger.info(f"[{KEYWORD_EXTRACT_NODE}] 提取结果 - 关键词: {keywords}")

    progress.complete("关键词提取完成.")

    return {
        KEYWORD_EXTRACT_NODE_OUTPUT: keywords,
        EVIDENCES: evidences,
        RESULT: keywords,
    }


def schema_recall_node(state: Nl2SqlState, writer: StreamWriter) -> dict:
    """Schema召回节点 - 根据问题和关键词召回相关的表与列"""
    log_node_start(SCHEMA_RECALL_NODE, state, [INPUT_KEY, KEYWORD_EXTRACT_NODE_OUTPUT])
    progress = ProgressReporter(SCHEMA_RECALL_NODE, writer)

    query = get_string_value(state, INPUT_KEY)
    keywords = get_list_value(state, KEYWORD_EXTRACT_NODE_OUTPUT, [])
    service = get_schema_service()

    progress.status("开始召回Schema信息...")

    table_documents = list(service.get_table_documents(query))
    progress.status(f"表信息召回完成，数量: {len(table_documents)}")

    column_documents_by_keywords = [list(group) for group in service.get_column_documents_by_keywords(keywords)]
    progress.status(f"列信息召回完成，数量: {len(column_documents_by_keywords)}")

    if len(column_documents_by_keywords) != len(keywords):
        raise ValueError(
            f"列文档分组数量({len(column_documents_by_keywords)})与关键词数量({len(keywords)})不一致"
        )

    logger.info(
        f"[{SCHEMA_RECALL_NODE}] Schema召回结果 - 表文档数量: {len(table_documents)}, "
        f"关键词相关列文档组数: {len(column_documents_by_keywords)}"
    )
    progress.complete("Schema信息召回完成.")

    return {
        TABLE_DOCUMENTS_FOR_SCHEMA_OUTPUT: table_documents,
        COLUMN_DOCUMENTS_BY_KEYWORDS_OUTPUT: column_documents_by_keywords,
    }


def validate_sql(sql: str) -> SqlValidation:
    """
    在配置的数据源上执行 SQL，根据是否抛出异常判断语法是否正确。

    执行异常属于预期结果，转换为 InvalidSql 返回，不向上抛出。
    """
    if not sql or not sql.strip():
        return InvalidSql(message="SQL语句为空")

    from database import DbQueryParameter
    parameter = DbQueryParameter(sql=sql)

    try:
        get_db_accessor().execute_sql_and_return_object(get_db_config(), parameter)
    except Exception as e:
        return InvalidSql(message=str(e))
    return ValidSql()


def sql_validate_node(state: Nl2SqlState, writer: StreamWriter) -> dict:
    """
    SQL校验节点 - 校验 SQL 语句的语法正确性。

    已废弃：语法校验依赖真实执行 SQL，建议使用语义一致性校验替代。
    仅为兼容保留，默认不接入工作流。
    """
    log_node_start(SQL_VALIDATE_NODE, state, [SQL_GENERATE_OUTPUT])
    logger.warning(f"[{SQL_VALIDATE_NODE}] 此节点已废弃，建议使用语义一致性校验")
    warnings.warn(
        "sql_validate_node is deprecated, use a semantic consistency check instead",
        DeprecationWarning,
        stacklevel=2,
    )
    progress = ProgressReporter(SQL_VALIDATE_NODE, writer)

    sql = get_string_value(state, SQL_GENERATE_OUTPUT, "")
    logger.info(f"[{SQL_VALIDATE_NODE}] 开始验证SQL语句: {sql}")

    progress.status("开始验证SQL语句...")
    outcome = validate_sql(sql)

    if isinstance(outcome, InvalidSql):
        logger.error(f"[{SQL_VALIDATE_NODE}] SQL语法验证失败 - 原因: {outcome.message}")
        progress.status(f"SQL语法验证失败: {outcome.message}")
        progress.complete("SQL语法验证完成.")
        return {SQL_VALIDATE_NODE_OUTPUT: False, SQL_VALIDATE_EXCEPTION_OUTPUT: outcome.message}

    logger.info(f"[{SQL_VALIDATE_NODE}] SQL语法验证通过")
    progress.status("SQL语法验证通过.")
    progress.complete("SQL语法验证完成.")
    return {SQL_VALIDATE_NODE_OUTPUT: True}
