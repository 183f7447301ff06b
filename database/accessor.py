"""
数据库访问器

以 DbConfig 描述数据源，以 DbQueryParameter 描述一次查询，
每次执行都使用独立连接。
"""
from typing import Any, Optional
from pydantic import BaseModel, Field

from config import settings
from utils.logger import get_logger
from .mysql_connector import MySQLConnector

logger = get_logger("database")


class DbConfig(BaseModel):
    """数据源配置。"""
    host: str = "localhost"
    port: int = 3306
    user: str = "root"
    password: str = Field(default="", repr=False)
    database: str = ""
    connect_timeout: int = 10
    
    @classmethod
    def from_settings(cls) -> "DbConfig":
        """从全局配置构建数据源配置。"""
        return cls(
            host=settings.mysql_host,
            port=settings.mysql_port,
            user=settings.mysql_user,
            password=settings.mysql_password,
            database=settings.mysql_database,
            connect_timeout=settings.mysql_connect_timeout,
        )


class DbQueryParameter(BaseModel):
    """查询参数。"""
    sql: str
    params: Optional[tuple] = None


class DbAccessor:
    """
    数据库访问器
    
    执行失败时抛出 ConnectionError（连接失败）或 SqlExecutionError（语句失败）。
    """
    
    def execute_sql_and_return_object(
        self,
        config: DbConfig,
        parameter: DbQueryParameter,
    ) -> list[dict[str, Any]]:
        """
        在指定数据源上执行 SQL 并返回结果行。
        
        Args:
            config: 数据源配置
            parameter: 查询参数
            
        Returns:
            结果行列表
        """
        logger.debug(f"[{config.host}:{config.port}/{config.database}] 执行SQL: {parameter.sql}")
        with MySQLConnector(
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database,
            connect_timeout=config.connect_timeout,
        ) as conn:
            return conn.execute(parameter.sql, parameter.params)
