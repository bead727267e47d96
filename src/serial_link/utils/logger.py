"""
日志记录模块
============

提供统一的日志记录功能，支持彩色输出和调用位置追踪。

默认日志级别可通过环境变量 SERIAL_LINK_LOG_LEVEL 设置（如 DEBUG）。
"""

import datetime
import inspect
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Union

from ..config.constants import LOG_LEVEL_ENV

ROOT_LOGGER_NAME = "serial_link"


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record):
        """格式化日志记录"""
        # 跳过logging自身的栈帧，定位真正的调用者
        frame = inspect.currentframe()
        logging_dir = Path(logging.__file__).parent
        try:
            while frame:
                filename = frame.f_code.co_filename
                if filename != __file__ and Path(filename).parent != logging_dir:
                    caller = f"{Path(filename).name}.{frame.f_code.co_name}():{frame.f_lineno}"
                    break
                frame = frame.f_back
            else:
                caller = f"{record.filename}.{record.funcName}():{record.lineno}"
        finally:
            del frame

        # 毫秒精度的时间戳
        now = datetime.datetime.fromtimestamp(record.created)
        timestamp = now.strftime("%Y-%m-%d %H:%M:%S") + f".{now.microsecond // 1000:03d}"

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        return f"{color}[{timestamp}] {record.getMessage()} [{caller}]{reset}"


# 已创建的日志器
_loggers: Dict[str, logging.Logger] = {}


def default_level() -> int:
    """从环境变量读取默认日志级别，无效时为INFO"""
    name = os.environ.get(LOG_LEVEL_ENV, "").strip().upper()
    level = logging.getLevelName(name) if name else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: Optional[Union[int, str]] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    设置日志器

    Args:
        name: 日志器名称
        level: 日志级别，None表示使用环境变量或INFO
        log_file: 日志文件路径，None表示不写入文件
        console_output: 是否输出到控制台

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(default_level() if level is None else level)

    # 清除已有的处理器
    logger.handlers.clear()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logger.addHandler(file_handler)

    # 防止重复输出
    logger.propagate = False

    _loggers[name] = logger
    return logger


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称

    Returns:
        日志器实例
    """
    if name not in _loggers:
        setup_logger(name)
    return _loggers[name]


def set_level(level: Union[int, str]) -> None:
    """修改所有已创建日志器的级别"""
    for logger in _loggers.values():
        logger.setLevel(level)
