"""
系统常量定义
============

定义串口链路层使用的各种常量，以及默认协议目录（起始字节、设备码、
各消息类型的负载长度、CRC多项式）。

协议目录由固件侧定义，这里的取值只是默认目录，
需要对接其他固件时请构造自己的 ProtocolCatalog。
"""

from enum import IntEnum
from typing import Final, Dict


class MsgType(IntEnum):
    """消息类型枚举"""

    PING = 0x00  # 心跳
    ACK = 0x01  # 应答
    REQ_PARAMS = 0x02  # 请求参数
    PARAMS = 0x03  # 参数回复
    CONTROLS = 0x04  # 控制量
    SET_MOTOR_DIRS = 0x05  # 设置电机方向
    ARM_MOTORS = 0x06  # 解锁电机
    DISARM_MOTORS = 0x07  # 上锁电机
    TELEMETRY = 0x08  # 遥测（MAVLink帧，变长）


# 帧结构：| 起始字节(1B) | 设备码(1B) | 消息类型(1B) | 负载(NB) | CRC(1B) |
PAYLOAD_START_I: Final[int] = 3  # 负载起始下标，即帧头长度
CRC_SIZE: Final[int] = 1  # 校验字节长度

# 默认协议目录
MSG_START: Final[int] = 0x45  # 帧起始字节
DEVICE_CODE_PC: Final[int] = 0x0A  # 上位机设备码
DEVICE_CODE_FC: Final[int] = 0x0B  # 飞控设备码（固件发出的帧）
CRC_POLY: Final[int] = 0xAB  # CRC-8 生成多项式
MAVLINK_SIZE: Final[int] = 12  # MAVLink v2 帧头(10B) + 校验(2B)
MAVLINK_LEN_OFFSET: Final[int] = 1  # MAVLink帧中负载长度字段的位置

MSG_PAYLOAD_SIZES: Final[Dict[int, int]] = {
    # 消息类型 -> 负载长度
    MsgType.PING: 0,
    MsgType.ACK: 0,
    MsgType.REQ_PARAMS: 0,
    MsgType.PARAMS: 36,
    MsgType.CONTROLS: 18,
    MsgType.SET_MOTOR_DIRS: 1,
    MsgType.ARM_MOTORS: 0,
    MsgType.DISARM_MOTORS: 0,
    MsgType.TELEMETRY: 255 + MAVLINK_SIZE,  # 上限，实际长度由负载决定
}

# 串口默认配置
DEFAULT_BAUDRATE: Final[int] = 460_800  # 默认波特率
DEFAULT_TIMEOUT: Final[float] = 0.01  # 读超时(秒)，即10ms
DISCONNECTED_TIMEOUT_MS: Final[int] = 1_000  # 超过该时间无响应视为断开(毫秒)

# 端口识别
SLCAN_PRODUCT_KEYWORD: Final[str] = "slcan"  # 串口CAN适配器的产品名关键字
PORT_KIND_USB: Final[str] = "usb"
PORT_KIND_OTHER: Final[str] = "other"

# 日志
LOG_LEVEL_ENV: Final[str] = "SERIAL_LINK_LOG_LEVEL"
