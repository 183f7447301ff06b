# Database module
from .mysql_connector import MySQLConnector, SqlExecutionError
from .accessor import DbAccessor, DbConfig, DbQueryParameter

__all__ = ["MySQLConnector", "SqlExecutionError", "DbAccessor", "DbConfig", "DbQueryParameter"]
