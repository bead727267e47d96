"""
配置模块
=======

包含系统常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "MsgType",
    "MSG_START",
    "DEVICE_CODE_PC",
    "PAYLOAD_START_I",
    "CRC_SIZE",
    "DEFAULT_BAUDRATE",
    "DEFAULT_TIMEOUT",
    "DISCONNECTED_TIMEOUT_MS",
    "SLCAN_PRODUCT_KEYWORD",
    # 配置
    "SerialConfig",
    "BaudTable",
    "LinkConfig",
]
