"""
工具模块
========

包含日志记录、重试退避等工具功能。
"""

from .logger import get_logger, setup_logger
from .retry import retry_call, exponential_backoff

__all__ = [
    "get_logger",
    "setup_logger",
    "retry_call",
    "exponential_backoff"
]
