"""
数据帧处理模块
==============

负责把消息类型和负载编码成固件期望的发送帧，并写入串口。

数据帧格式：| 起始字节(1B) | 设备码(1B) | 消息类型(1B) | 负载(NB) | CRC(1B) |

CRC覆盖起始字节到负载末尾的全部字节，不包含自身。
"""

import serial
from typing import Optional, Union

from ..config.constants import MsgType, PAYLOAD_START_I, CRC_SIZE
from .catalog import DEFAULT_CATALOG, ProtocolCatalog
from .channel import Channel
from .checksum import calc_crc
from .errors import FrameError, TransportError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class FrameHandler:
    """数据帧编码器"""

    @staticmethod
    def frame_size(
        msg_type: Union[MsgType, int],
        payload: bytes = b"",
        catalog: ProtocolCatalog = DEFAULT_CATALOG,
    ) -> int:
        """
        计算消息编码后的整帧长度

        调用 encode 时应传入该长度作为缓冲区容量。

        Args:
            msg_type: 消息类型
            payload: 负载数据，仅变长消息需要
            catalog: 协议目录

        Returns:
            帧长度 = 帧头 + 负载长度 + 1字节CRC
        """
        return catalog.frame_size(msg_type, payload)

    @staticmethod
    def encode(
        msg_type: Union[MsgType, int],
        payload: bytes,
        buffer_capacity: int,
        catalog: ProtocolCatalog = DEFAULT_CATALOG,
    ) -> bytes:
        """
        将消息类型和负载编码成数据帧

        负载按消息类型的长度原样拷贝，超出部分忽略，不做内容校验。

        Args:
            msg_type: 消息类型，可以是MsgType枚举或整数
            payload: 负载数据
            buffer_capacity: 帧缓冲区容量，必须等于整帧长度
            catalog: 协议目录

        Returns:
            编码完成、可直接发送的数据帧

        Raises:
            FrameError: 容量与消息长度不符，或负载长度不足

        Examples:
            >>> frame = FrameHandler.encode(MsgType.PING, b'', 4)
            >>> len(frame)
            4
        """
        payload_size = catalog.payload_size(msg_type, payload)
        expected = PAYLOAD_START_I + payload_size + CRC_SIZE

        if buffer_capacity != expected:
            raise FrameError(
                f"缓冲区容量不匹配: 消息类型={int(msg_type):#04x}, "
                f"容量={buffer_capacity}, 需要={expected}"
            )
        if len(payload) < payload_size:
            raise FrameError(
                f"负载长度不足: 需要={payload_size}, 实际={len(payload)}"
            )

        tx_buf = bytearray(buffer_capacity)
        tx_buf[0] = catalog.start_byte
        tx_buf[1] = catalog.device_code
        tx_buf[2] = int(msg_type)

        crc_i = PAYLOAD_START_I + payload_size
        tx_buf[PAYLOAD_START_I:crc_i] = payload[:payload_size]
        tx_buf[crc_i] = calc_crc(catalog.crc_table, tx_buf, crc_i)

        return bytes(tx_buf)


def write_all(port: Channel, data: bytes) -> None:
    """
    一次阻塞写入全部数据

    Args:
        port: 已打开的串口
        data: 要写入的数据

    Raises:
        TransportError: 写入出错或只写入了部分数据
    """
    try:
        written = port.write(data)
    except serial.SerialException as e:
        raise TransportError(TransportError.IO, str(e)) from e

    # 部分通道实现不返回写入字节数
    if written is not None and written != len(data):
        raise TransportError(
            TransportError.IO, f"部分写入: {written}/{len(data)}字节"
        )


def send_payload(
    msg_type: Union[MsgType, int],
    payload: bytes,
    port: Channel,
    buffer_capacity: Optional[int] = None,
    catalog: ProtocolCatalog = DEFAULT_CATALOG,
) -> bytes:
    """
    编码并发送一帧，不处理响应

    Args:
        msg_type: 消息类型
        payload: 负载数据
        port: 已打开的串口
        buffer_capacity: 帧容量，省略时按消息类型计算
        catalog: 协议目录

    Returns:
        已发送的数据帧
    """
    if buffer_capacity is None:
        buffer_capacity = catalog.frame_size(msg_type, payload)

    frame = FrameHandler.encode(msg_type, payload, buffer_capacity, catalog)
    write_all(port, frame)
    logger.debug(f"已发送帧: {frame.hex(' ')}")
    return frame


def send_cmd(
    msg_type: Union[MsgType, int],
    port: Channel,
    catalog: ProtocolCatalog = DEFAULT_CATALOG,
) -> bytes:
    """发送无负载的命令，帧中只有消息类型有意义"""
    return send_payload(msg_type, b"", port, PAYLOAD_START_I + CRC_SIZE, catalog)
