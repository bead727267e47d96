"""
协议目录
========

把固件侧定义的协议常量（起始字节、设备码、消息负载长度、CRC查找表）
收拢为一个不可变对象，供帧编码使用。
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple, Union

from ..config.constants import (
    MsgType,
    MSG_START,
    DEVICE_CODE_PC,
    MSG_PAYLOAD_SIZES,
    MAVLINK_SIZE,
    MAVLINK_LEN_OFFSET,
    PAYLOAD_START_I,
    CRC_SIZE,
)
from .checksum import CRC_LUT
from .errors import FrameError


@dataclass(frozen=True)
class ProtocolCatalog:
    """协议目录"""

    start_byte: int = MSG_START
    device_code: int = DEVICE_CODE_PC
    # 构造后为只读映射，不参与哈希
    payload_sizes: Mapping[int, int] = field(
        default_factory=lambda: dict(MSG_PAYLOAD_SIZES), hash=False
    )
    # 唯一的变长消息类型，负载长度 = payload[variable_length_offset] + variable_size_constant
    variable_msg_type: Optional[int] = int(MsgType.TELEMETRY)
    variable_length_offset: int = MAVLINK_LEN_OFFSET
    variable_size_constant: int = MAVLINK_SIZE
    crc_table: Tuple[int, ...] = CRC_LUT

    def __post_init__(self):
        """参数验证"""
        if not 0 <= self.start_byte <= 0xFF:
            raise ValueError("start_byte必须是单字节")
        if not 0 <= self.device_code <= 0xFF:
            raise ValueError("device_code必须是单字节")
        if len(self.crc_table) != 256:
            raise ValueError("crc_table必须有256项")

        sizes = {int(k): int(v) for k, v in self.payload_sizes.items()}
        for msg_type, size in sizes.items():
            if not 0 <= msg_type <= 0xFF:
                raise ValueError(f"消息类型必须是单字节: {msg_type}")
            if size < 0:
                raise ValueError(f"负载长度不能为负数: {msg_type:#04x}={size}")
        if self.variable_msg_type is not None and self.variable_msg_type not in sizes:
            raise ValueError("variable_msg_type必须出现在payload_sizes中")

        object.__setattr__(self, "payload_sizes", MappingProxyType(sizes))
        object.__setattr__(self, "crc_table", tuple(self.crc_table))

    def declared_size(self, msg_type: Union[MsgType, int]) -> int:
        """消息类型声明的负载长度"""
        try:
            return self.payload_sizes[int(msg_type)]
        except KeyError:
            raise FrameError(f"未知的消息类型: {int(msg_type):#04x}") from None

    def payload_size(self, msg_type: Union[MsgType, int], payload: bytes = b"") -> int:
        """
        计算实际负载长度

        固定长度的消息返回声明长度；变长消息从负载内的长度字段读取，
        再加上固定的帧头常量。

        Args:
            msg_type: 消息类型
            payload: 负载数据

        Returns:
            负载长度

        Raises:
            FrameError: 未知消息类型，或变长负载不足以包含长度字段
        """
        declared = self.declared_size(msg_type)
        if self.variable_msg_type is None or int(msg_type) != self.variable_msg_type:
            return declared

        if len(payload) <= self.variable_length_offset:
            raise FrameError(
                f"变长负载过短，无法读取长度字段: {len(payload)}字节"
            )
        return payload[self.variable_length_offset] + self.variable_size_constant

    def frame_size(self, msg_type: Union[MsgType, int], payload: bytes = b"") -> int:
        """整帧长度：帧头 + 负载 + 校验字节"""
        return PAYLOAD_START_I + self.payload_size(msg_type, payload) + CRC_SIZE


DEFAULT_CATALOG = ProtocolCatalog()
