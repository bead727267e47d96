"""
配置管理
========

提供串口、波特率选择和链路相关的配置类。
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import serial

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    DISCONNECTED_TIMEOUT_MS,
    SLCAN_PRODUCT_KEYWORD,
)


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 读超时时间

    def to_serial_kwargs(self) -> dict:
        """转换为serial.Serial的参数字典"""
        return {
            "port": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }


@dataclass
class BaudTable:
    """
    波特率选择表

    根据端口的识别结果选择打开时使用的波特率：
    直连设备使用主波特率，串口CAN适配器使用桥接波特率，
    厂商名命中 manufacturer_bauds 中的关键字时改用对应的波特率。
    """

    primary_baud: int = DEFAULT_BAUDRATE  # 直连波特率
    bridge_keyword: str = SLCAN_PRODUCT_KEYWORD  # 适配器产品名关键字
    bridge_baud: int = DEFAULT_BAUDRATE  # 适配器波特率
    manufacturer_bauds: Dict[str, int] = field(default_factory=dict)  # 厂商关键字 -> 波特率

    def __post_init__(self):
        """参数验证"""
        if self.primary_baud <= 0:
            raise ValueError("primary_baud必须大于0")
        if self.bridge_baud <= 0:
            raise ValueError("bridge_baud必须大于0")
        if not self.bridge_keyword:
            raise ValueError("bridge_keyword不能为空")
        for keyword, baud in self.manufacturer_bauds.items():
            if not keyword:
                raise ValueError("厂商关键字不能为空")
            if baud <= 0:
                raise ValueError(f"厂商关键字 {keyword} 的波特率必须大于0")

    def is_bridge_product(self, product: Optional[str]) -> bool:
        """产品名是否包含适配器关键字（忽略大小写）"""
        return bool(product) and self.bridge_keyword.lower() in product.lower()

    def manufacturer_override(self, manufacturer: Optional[str]) -> Optional[int]:
        """
        按厂商名查找替代波特率

        Args:
            manufacturer: 端口的厂商字符串，可能为None

        Returns:
            第一个命中的关键字对应的波特率，未命中返回None
        """
        if not manufacturer:
            return None
        lowered = manufacturer.lower()
        for keyword, baud in self.manufacturer_bauds.items():
            if keyword.lower() in lowered:
                return baud
        return None

    def baud_for(self, bridged: bool, manufacturer: Optional[str] = None) -> int:
        """
        计算打开端口时使用的波特率

        厂商覆盖优先于按连接类型选出的波特率。

        Args:
            bridged: 是否经由串口CAN适配器连接
            manufacturer: 端口的厂商字符串

        Returns:
            最终选用的波特率
        """
        override = self.manufacturer_override(manufacturer)
        if override is not None:
            return override
        return self.bridge_baud if bridged else self.primary_baud


@dataclass
class LinkConfig:
    """链路配置类"""

    usb_serial_number: str = ""  # 设备的USB序列号，设备不提供时为空
    baud_table: BaudTable = field(default_factory=BaudTable)  # 波特率选择表
    timeout: float = DEFAULT_TIMEOUT  # 打开端口时的读超时(秒)
    disconnected_timeout: float = DISCONNECTED_TIMEOUT_MS / 1000  # 无响应判定断开的时间(秒)

    def __post_init__(self):
        """参数验证"""
        if self.timeout <= 0:
            raise ValueError("timeout必须大于0")
        if self.disconnected_timeout <= 0:
            raise ValueError("disconnected_timeout必须大于0")
