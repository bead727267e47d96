"""
链路状态
========

作为应用状态的一个字段使用：持有设备的串口连接，在没有连接时
按需重新发现设备，并记录最近一次发送和最近一次响应的时间，
供调用方判断连接是否已失效。

本模块不启动任何后台任务，断线检测由调用方轮询驱动。
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..config.constants import MsgType
from ..config.settings import LinkConfig
from .catalog import DEFAULT_CATALOG, ProtocolCatalog
from .channel import Channel
from .connection_manager import ConnectionManager, ConnectionType, DiscoveryResult
from .errors import NotConnectedError, TransportError
from .frame_handler import FrameHandler, write_all
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ConnectionStatus(Enum):
    """连接状态"""

    NOT_CONNECTED = "not_connected"
    CONNECTED = "connected"

    def as_str(self) -> str:
        """界面显示用的状态文字"""
        if self is ConnectionStatus.CONNECTED:
            return "Connected"
        return "Not connected"

    def as_color(self) -> str:
        """界面显示用的指示颜色"""
        if self is ConnectionStatus.CONNECTED:
            return "#90EE90"  # 浅绿
        return "#FFFF00"  # 黄


@dataclass
class SerialInterface:
    """当前持有的串口及其连接信息"""

    serial_port: Optional[Channel] = None
    connection_type: ConnectionType = ConnectionType.USB
    baudrate: Optional[int] = None
    port_name: Optional[str] = None

    @classmethod
    def from_discovery(cls, result: DiscoveryResult) -> "SerialInterface":
        return cls(
            serial_port=result.port,
            connection_type=result.connection_type,
            baudrate=result.baudrate,
            port_name=result.port_name if result.connected else None,
        )


class LinkState:
    """
    链路状态

    串口只由本对象持有；替换或断开时关闭旧串口。
    同一实例不支持多线程并发调用。
    """

    def __init__(
        self,
        config: Optional[LinkConfig] = None,
        catalog: ProtocolCatalog = DEFAULT_CATALOG,
        manager=ConnectionManager,
    ):
        """
        初始化链路状态

        Args:
            config: 链路配置，省略时使用默认配置
            catalog: 协议目录
            manager: 串口发现器，需提供 discover_and_open
        """
        self.config = config if config is not None else LinkConfig()
        self.catalog = catalog
        self._manager = manager
        self.interface = SerialInterface()
        self.last_error: Optional[TransportError] = None
        now = time.monotonic()
        self.last_query = now
        # 用于判断是否仍然连接
        self.last_response = now

    @property
    def usb_serial_number(self) -> str:
        return self.config.usb_serial_number

    @property
    def connection_status(self) -> ConnectionStatus:
        """串口存在即为已连接"""
        if self.interface.serial_port is not None:
            return ConnectionStatus.CONNECTED
        return ConnectionStatus.NOT_CONNECTED

    @property
    def connection_type(self) -> ConnectionType:
        return self.interface.connection_type

    def connect(self) -> bool:
        """
        重新发现并打开设备串口

        Returns:
            是否已连接
        """
        self._close_port()
        self.interface = SerialInterface()

        result = self._manager.discover_and_open(
            self.config.usb_serial_number,
            self.config.baud_table,
            self.config.timeout,
        )
        self.interface = SerialInterface.from_discovery(result)
        self.last_error = result.error

        if result.connected:
            # 新连接从现在开始计算超时
            self.last_response = time.monotonic()
        return result.connected

    def get_port(self) -> Channel:
        """
        获取可用的串口，没有时先尝试重新连接

        Returns:
            已打开的串口

        Raises:
            NotConnectedError: 没有找到设备
        """
        if self.interface.serial_port is None:
            self.connect()

        if self.interface.serial_port is None:
            raise NotConnectedError()
        return self.interface.serial_port

    def disconnect(self) -> None:
        """关闭并丢弃当前串口，下次 get_port 时重新发现"""
        if self.interface.serial_port is not None:
            logger.info(f"断开串口 {self.interface.port_name}")
        self._close_port()
        self.interface = SerialInterface()

    def mark_response(self, now: Optional[float] = None) -> None:
        """收到设备响应时调用"""
        self.last_response = time.monotonic() if now is None else now

    def is_stale(self, now: Optional[float] = None) -> bool:
        """距离上次响应是否超过断开阈值"""
        if now is None:
            now = time.monotonic()
        return now - self.last_response > self.config.disconnected_timeout

    def drop_if_stale(self, now: Optional[float] = None) -> bool:
        """
        连接已失效时断开，下次 get_port 会重新发现设备

        Returns:
            是否执行了断开
        """
        if self.interface.serial_port is None or not self.is_stale(now):
            return False

        logger.warning(
            f"设备超过 {self.config.disconnected_timeout:.3f}s 无响应，断开串口"
        )
        self.disconnect()
        return True

    def send(
        self,
        msg_type: Union[MsgType, int],
        payload: bytes = b"",
        buffer_capacity: Optional[int] = None,
    ) -> bytes:
        """
        编码并发送一帧

        Args:
            msg_type: 消息类型
            payload: 负载数据
            buffer_capacity: 帧容量，省略时按消息类型计算

        Returns:
            已发送的数据帧

        Raises:
            NotConnectedError: 没有找到设备
            TransportError: 写入失败
            FrameError: 帧容量与消息不符
        """
        port = self.get_port()
        if buffer_capacity is None:
            buffer_capacity = self.catalog.frame_size(msg_type, payload)
        frame = FrameHandler.encode(msg_type, payload, buffer_capacity, self.catalog)

        # 只有到达串口的发送才计入 last_query
        self.last_query = time.monotonic()
        write_all(port, frame)
        logger.debug(f"已发送帧: {frame.hex(' ')}")
        return frame

    def _close_port(self) -> None:
        port = self.interface.serial_port
        if port is None:
            return
        try:
            port.close()
        except Exception as e:
            logger.error(f"关闭串口失败: {e}")
