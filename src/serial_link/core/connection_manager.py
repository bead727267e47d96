"""
串口发现与连接
==============

枚举系统串口，识别目标设备（USB直连或经串口CAN适配器），
并以匹配的波特率打开。

识别顺序：
1. USB序列号与设备序列号完全一致 -> 直连
2. 产品名包含适配器关键字（忽略大小写） -> 桥接
3. 厂商名命中替代波特率关键字时，覆盖上面选出的波特率

每次调用最多尝试打开一个端口，首个命中者即为结果。
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

import serial
from serial.tools import list_ports

from ..config.constants import DEFAULT_TIMEOUT, PORT_KIND_USB, PORT_KIND_OTHER
from ..config.settings import BaudTable, SerialConfig
from .errors import TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)

_NOT_FOUND_ERRNOS = {errno.ENOENT, errno.ENODEV, errno.ENXIO}
_PERMISSION_ERRNOS = {errno.EACCES, errno.EPERM}


class ConnectionType(Enum):
    """连接类型"""

    USB = "usb"  # 设备自身的USB串口
    CAN = "can"  # 经串口CAN适配器

    def __str__(self) -> str:
        return "USB直连" if self is ConnectionType.USB else "CAN桥接"


@dataclass(frozen=True)
class EndpointDescriptor:
    """一次枚举得到的串口描述"""

    port_name: str
    port_kind: str = PORT_KIND_OTHER
    serial_number: Optional[str] = None
    product: Optional[str] = None
    manufacturer: Optional[str] = None

    @property
    def is_usb(self) -> bool:
        return self.port_kind == PORT_KIND_USB

    @classmethod
    def from_port_info(cls, info) -> "EndpointDescriptor":
        """由 serial.tools.list_ports 的 ListPortInfo 构造"""
        is_usb = getattr(info, "vid", None) is not None
        return cls(
            port_name=info.device,
            port_kind=PORT_KIND_USB if is_usb else PORT_KIND_OTHER,
            serial_number=getattr(info, "serial_number", None) if is_usb else None,
            product=getattr(info, "product", None) if is_usb else None,
            manufacturer=getattr(info, "manufacturer", None) if is_usb else None,
        )


@dataclass
class DiscoveryResult:
    """
    发现结果

    port 为None表示没有连接；此时 error 为None说明只是没有插入设备，
    否则是打开端口时遇到的真实错误。
    """

    port: Optional[serial.Serial] = None
    connection_type: ConnectionType = ConnectionType.USB
    baudrate: Optional[int] = None
    port_name: Optional[str] = None
    error: Optional[TransportError] = None

    @property
    def connected(self) -> bool:
        return self.port is not None


def classify_open_error(exc: Exception) -> TransportError:
    """
    将打开串口时的异常归类

    Windows下pyserial只把WinError放进消息文本，因此同时检查消息内容。
    """
    code = getattr(exc, "errno", None)
    message = str(exc)

    if (
        isinstance(exc, FileNotFoundError)
        or code in _NOT_FOUND_ERRNOS
        or "FileNotFoundError" in message
    ):
        kind = TransportError.NOT_FOUND
    elif (
        isinstance(exc, PermissionError)
        or code in _PERMISSION_ERRNOS
        or "PermissionError" in message
    ):
        kind = TransportError.PERMISSION
    elif code == errno.EBUSY:
        kind = TransportError.BUSY
    else:
        kind = TransportError.IO

    return TransportError(kind, message)


class ConnectionManager:
    """串口发现与连接管理器"""

    @staticmethod
    def list_endpoints() -> List[EndpointDescriptor]:
        """
        枚举系统当前可见的串口

        Returns:
            串口描述列表，枚举失败时返回空列表
        """
        try:
            return [
                EndpointDescriptor.from_port_info(info)
                for info in list_ports.comports()
            ]
        except Exception as e:
            logger.error(f"获取串口列表失败: {e}")
            return []

    @staticmethod
    def classify(
        endpoint: EndpointDescriptor,
        identity_key: str,
        baud_table: BaudTable,
    ) -> Optional[Tuple[ConnectionType, int]]:
        """
        判断端口是否为目标设备

        Args:
            endpoint: 串口描述
            identity_key: 设备的USB序列号，为空表示设备不提供序列号
            baud_table: 波特率选择表

        Returns:
            (连接类型, 波特率)，不匹配时返回None
        """
        if not endpoint.is_usb:
            return None

        if identity_key and endpoint.serial_number == identity_key:
            connection_type = ConnectionType.USB
        elif baud_table.is_bridge_product(endpoint.product):
            connection_type = ConnectionType.CAN
        else:
            return None

        baudrate = baud_table.baud_for(
            connection_type is ConnectionType.CAN, endpoint.manufacturer
        )
        return connection_type, baudrate

    @staticmethod
    def open_port(config: SerialConfig) -> serial.Serial:
        """
        打开串口

        Args:
            config: 串口配置

        Returns:
            已打开的串口对象

        Raises:
            TransportError: 打开失败，kind 标明错误类别
        """
        try:
            return serial.Serial(**config.to_serial_kwargs())
        except (serial.SerialException, OSError) as e:
            raise classify_open_error(e) from e

    @staticmethod
    def discover_and_open(
        identity_key: str,
        baud_table: BaudTable,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> DiscoveryResult:
        """
        查找并打开目标设备的串口

        Args:
            identity_key: 设备的USB序列号
            baud_table: 波特率选择表
            timeout: 读超时时间(秒)

        Returns:
            发现结果；没有设备不视为错误
        """
        for endpoint in ConnectionManager.list_endpoints():
            match = ConnectionManager.classify(endpoint, identity_key, baud_table)
            if match is None:
                continue

            connection_type, baudrate = match
            logger.debug(
                f"匹配到串口 {endpoint.port_name}: {connection_type}, 波特率 {baudrate}"
            )

            config = SerialConfig(
                port=endpoint.port_name, baudrate=baudrate, timeout=timeout
            )
            try:
                port = ConnectionManager.open_port(config)
            except TransportError as e:
                if e.is_not_found:
                    # 设备在枚举后被拔出
                    logger.debug(f"串口 {endpoint.port_name} 已不存在: {e.description}")
                    return DiscoveryResult(port_name=endpoint.port_name)

                logger.error(f"打开串口失败: {e.kind} - {e.description}")
                return DiscoveryResult(port_name=endpoint.port_name, error=e)

            logger.info(f"成功打开串口 {endpoint.port_name} ({connection_type}, {baudrate})")
            return DiscoveryResult(
                port=port,
                connection_type=connection_type,
                baudrate=baudrate,
                port_name=endpoint.port_name,
            )

        return DiscoveryResult()

    @staticmethod
    def print_available_ports(
        identity_key: str = "", baud_table: Optional[BaudTable] = None
    ) -> None:
        """打印系统可用的串口及其识别结果"""
        endpoints = ConnectionManager.list_endpoints()

        if not endpoints:
            print("没有找到可用的串口。")
            return

        if baud_table is None:
            baud_table = BaudTable()

        print("可用的串口：")
        for endpoint in endpoints:
            match = ConnectionManager.classify(endpoint, identity_key, baud_table)
            if match is None:
                verdict = "不匹配"
            else:
                verdict = f"{match[0]} @ {match[1]}"
            details = ", ".join(
                f"{label}={value}"
                for label, value in (
                    ("SN", endpoint.serial_number),
                    ("产品", endpoint.product),
                    ("厂商", endpoint.manufacturer),
                )
                if value
            )
            print(f"  {endpoint.port_name} [{endpoint.port_kind}] {details} -> {verdict}")
