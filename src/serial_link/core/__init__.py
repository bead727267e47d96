"""
核心模块
========

包含串口发现、链路状态、数据帧编码和校验算法等核心功能。
"""

from .errors import LinkError, NotConnectedError, TransportError, FrameError
from .checksum import build_crc_table, calc_crc, CRC_LUT
from .catalog import ProtocolCatalog, DEFAULT_CATALOG
from .frame_handler import FrameHandler, send_payload, send_cmd, write_all
from .connection_manager import (
    ConnectionManager,
    ConnectionType,
    DiscoveryResult,
    EndpointDescriptor,
)
from .link_state import ConnectionStatus, LinkState, SerialInterface

__all__ = [
    "LinkError",
    "NotConnectedError",
    "TransportError",
    "FrameError",
    "build_crc_table",
    "calc_crc",
    "CRC_LUT",
    "ProtocolCatalog",
    "DEFAULT_CATALOG",
    "FrameHandler",
    "send_payload",
    "send_cmd",
    "write_all",
    "ConnectionManager",
    "ConnectionType",
    "DiscoveryResult",
    "EndpointDescriptor",
    "ConnectionStatus",
    "LinkState",
    "SerialInterface",
]
