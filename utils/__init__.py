"""
工具模块
"""
from .logger import get_logger, setup_logger, quiet_third_party

__all__ = ["get_logger", "setup_logger", "quiet_third_party"]
