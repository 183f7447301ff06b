"""
MySQL数据库连接器

提供MySQL数据库的连接与查询执行功能。
"""
from typing import Any, Optional
import mysql.connector
from mysql.connector import Error

from config import settings


class SqlExecutionError(RuntimeError):
    """SQL 执行失败，message 为数据库返回的原始错误信息。"""


class MySQLConnector:
    """
    MySQL数据库连接器
    
    用于执行SQL查询并返回结果。
    """
    
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: Optional[str] = None,
        connect_timeout: Optional[int] = None,
    ):
        """
        初始化MySQL连接器。
        
        Args:
            host: MySQL主机地址
            port: MySQL端口
            user: MySQL用户名
            password: MySQL密码
            database: MySQL数据库名
            connect_timeout: 连接超时时间（秒）
        """
        self.host = host or settings.mysql_host
        self.port = port or settings.mysql_port
        self.user = user or settings.mysql_user
        self.password = password or settings.mysql_password
        self.database = database or settings.mysql_database
        self.connect_timeout = connect_timeout or settings.mysql_connect_timeout
        self._connection = None
    
    def connect(self) -> None:
        """建立MySQL数据库连接。"""
        try:
            self._connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                connection_timeout=self.connect_timeout,
            )
        except Error as e:
            raise ConnectionError(f"MySQL连接失败: {e}")
    
    def disconnect(self) -> None:
        """关闭数据库连接。"""
        if self._connection and self._connection.is_connected():
            self._connection.close()
            self._connection = None
    
    def execute(self, sql: str, params: Optional[tuple] = None) -> list[dict[str, Any]]:
        """
        执行SQL查询并返回结果。
        
        Args:
            sql: SQL查询语句
            params: 可选的查询参数
            
        Returns:
            包含查询结果的字典列表
        """
        if not self._connection or not self._connection.is_connected():
            self.connect()
        
        # 使用buffered cursor，确保结果被完全读取
        cursor = self._connection.cursor(dictionary=True, buffered=True)
        try:
            cursor.execute(sql, params)
            
            if cursor.with_rows:
                results = cursor.fetchall()
                return self._convert_results(list(results) if results else [])
            # 非查询语句只返回影响行数，不提交事务
            return [{"affected_rows": cursor.rowcount}]
        except Error as e:
            raise SqlExecutionError(str(e.msg) if getattr(e, "msg", None) else str(e)) from e
        finally:
            cursor.close()
    
    def _convert_results(self, results: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """
        转换结果中不可JSON序列化的类型。
        
        将Decimal转为float，bytes转为str等。
        """
        from decimal import Decimal
        from datetime import datetime, date
        
        converted = []
        for row in results:
            new_row = {}
            for key, value in row.items():
                if isinstance(value, Decimal):
                    new_row[key] = float(value)
                elif isinstance(value, bytes):
                    new_row[key] = value.decode('utf-8', errors='ignore')
                elif isinstance(value, (datetime, date)):
                    new_row[key] = value.isoformat()
                else:
                    new_row[key] = value
            converted.append(new_row)
        return converted
    
    def get_columns(self) -> list[dict[str, Any]]:
        """
        获取当前库所有列的元数据。
        
        Returns:
            包含表名、列名、类型、注释等信息的列表
        """
        sql = """
        SELECT 
            c.TABLE_NAME,
            t.TABLE_COMMENT,
            c.COLUMN_NAME,
            c.DATA_TYPE,
            c.IS_NULLABLE,
            c.COLUMN_KEY,
            c.COLUMN_COMMENT
        FROM INFORMATION_SCHEMA.COLUMNS c
        JOIN INFORMATION_SCHEMA.TABLES t
            ON t.TABLE_SCHEMA = c.TABLE_SCHEMA AND t.TABLE_NAME = c.TABLE_NAME
        WHERE c.TABLE_SCHEMA = %s
        ORDER BY c.TABLE_NAME, c.ORDINAL_POSITION
        """
        return self.execute(sql, (self.database,))
    
    def __enter__(self):
        """上下文管理器入口。"""
        self.connect()
        return self
    
    def __exit__(self, exc_type, exc_val, exc_tb):
        """上下文管理器退出。"""
        self.disconnect()
