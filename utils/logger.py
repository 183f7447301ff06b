"""
日志配置模块

提供统一的日志配置，所有模块使用 nl2sql.<name> 子记录器。
"""
import logging
import sys
from typing import Optional, Union


# 日志格式
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}

ROOT_LOGGER_NAME = "nl2sql"

# 第三方库日志过于冗长
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "urllib3")


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    配置并返回一个日志记录器。
    
    Args:
        name: 日志记录器名称
        level: 日志级别（默认 INFO，也接受 "DEBUG" 等字符串）
        log_file: 日志文件路径（可选）
    
    Returns:
        配置好的 Logger 实例
    """
    if isinstance(level, str):
        if level.upper() not in LOG_LEVELS:
            raise ValueError(f"无效的日志级别: {level}，可选值: {', '.join(LOG_LEVELS)}")
        level = LOG_LEVELS[level.upper()]
    
    logger = logging.getLogger(name)
    
    # 避免重复配置
    if logger.handlers:
        return logger
    
    logger.setLevel(level)
    
    # 控制台处理器
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
    logger.addHandler(console_handler)
    
    # 文件处理器（可选）
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT))
        logger.addHandler(file_handler)
    
    return logger


def quiet_third_party(level: int = logging.WARNING) -> None:
    """降低第三方库日志级别。"""
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def get_logger(name: str = None) -> logging.Logger:
    """
    获取日志记录器。
    
    Args:
        name: 模块名称，将作为子记录器
    
    Returns:
        Logger 实例
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)
