"""
串口链路层
==========

上位机与嵌入式设备（飞控 / 串口CAN桥）通信的链路层核心。

主要功能：
- 枚举串口并识别目标设备（USB直连 / 串口CAN桥接）
- 按识别结果选择波特率并打开串口
- 维护连接状态，断开后按需重新发现
- 按固件约定的帧格式编码命令并计算CRC
"""

__version__ = "1.0.0"
__description__ = "上位机串口链路层：设备发现与命令帧编码"

# 导出主要类
from .config.settings import BaudTable, LinkConfig, SerialConfig
from .config.constants import MsgType
from .core.catalog import ProtocolCatalog, DEFAULT_CATALOG
from .core.connection_manager import ConnectionManager, ConnectionType
from .core.errors import LinkError, NotConnectedError, TransportError, FrameError
from .core.frame_handler import FrameHandler, send_cmd, send_payload
from .core.link_state import ConnectionStatus, LinkState

__all__ = [
    "BaudTable",
    "LinkConfig",
    "SerialConfig",
    "MsgType",
    "ProtocolCatalog",
    "DEFAULT_CATALOG",
    "ConnectionManager",
    "ConnectionType",
    "LinkError",
    "NotConnectedError",
    "TransportError",
    "FrameError",
    "FrameHandler",
    "send_cmd",
    "send_payload",
    "ConnectionStatus",
    "LinkState",
]
