"""
数据帧处理器测试
================

测试协议目录、FrameHandler编码以及发送函数。
"""

import pytest
import serial
from unittest.mock import MagicMock

from serial_link.config.constants import (
    MsgType,
    MSG_START,
    DEVICE_CODE_PC,
    MSG_PAYLOAD_SIZES,
    MAVLINK_SIZE,
    PAYLOAD_START_I,
)
from serial_link.core.catalog import DEFAULT_CATALOG, ProtocolCatalog
from serial_link.core.checksum import build_crc_table, calc_crc, CRC_LUT
from serial_link.core.errors import FrameError, TransportError
from serial_link.core.frame_handler import (
    FrameHandler,
    send_cmd,
    send_payload,
    write_all,
)


def make_port(written=None):
    """创建模拟串口，默认写入全部数据"""
    port = MagicMock()
    if written is None:
        port.write.side_effect = lambda data: len(data)
    else:
        port.write.return_value = written
    return port


def telemetry_payload(mavlink_len: int) -> bytes:
    """构造一个MAVLink v2帧作为遥测负载：字节1为MAVLink负载长度"""
    return bytes([0xFD, mavlink_len]) + bytes(range(mavlink_len + MAVLINK_SIZE - 2))


class TestProtocolCatalog:
    """协议目录测试"""

    def test_fixed_payload_size(self):
        """固定长度消息返回声明长度"""
        assert DEFAULT_CATALOG.payload_size(MsgType.CONTROLS) == 18
        assert DEFAULT_CATALOG.payload_size(MsgType.PING) == 0

    def test_variable_payload_size(self):
        """遥测负载长度 = 长度字段 + MAVLink帧头常量"""
        payload = telemetry_payload(5)
        assert DEFAULT_CATALOG.payload_size(MsgType.TELEMETRY, payload) == 5 + MAVLINK_SIZE

    def test_variable_payload_too_short(self):
        """变长负载读不到长度字段时报错"""
        with pytest.raises(FrameError):
            DEFAULT_CATALOG.payload_size(MsgType.TELEMETRY, b"\xfd")

    def test_unknown_msg_type(self):
        """未知消息类型报错"""
        with pytest.raises(FrameError, match="未知的消息类型"):
            DEFAULT_CATALOG.payload_size(0xEE)

    def test_catalog_without_variable_type(self):
        """自定义目录可以没有变长消息"""
        catalog = ProtocolCatalog(
            payload_sizes={0x08: 4}, variable_msg_type=None
        )
        assert catalog.payload_size(0x08, b"") == 4

    def test_invalid_crc_table(self):
        """CRC表必须有256项"""
        with pytest.raises(ValueError):
            ProtocolCatalog(crc_table=(0,) * 10)

    def test_payload_sizes_read_only(self):
        """负载长度表构造后不可修改，也不受原字典影响"""
        sizes = {0x08: 4}
        catalog = ProtocolCatalog(payload_sizes=sizes, variable_msg_type=None)
        sizes[0x08] = 9

        assert catalog.payload_size(0x08) == 4
        with pytest.raises(TypeError):
            catalog.payload_sizes[0x08] = 9
        with pytest.raises(TypeError):
            DEFAULT_CATALOG.payload_sizes[MsgType.PING] = 1

    def test_hashable(self):
        """目录可哈希，相同参数的目录相等"""
        assert hash(DEFAULT_CATALOG) == hash(ProtocolCatalog())
        assert DEFAULT_CATALOG == ProtocolCatalog()

    @pytest.mark.parametrize("sizes", [{0x100: 1}, {-1: 1}, {0x10: -1}])
    def test_invalid_payload_sizes(self, sizes):
        """消息类型必须是单字节，长度不能为负"""
        with pytest.raises(ValueError):
            ProtocolCatalog(payload_sizes=sizes, variable_msg_type=None)

    def test_variable_type_must_be_declared(self):
        with pytest.raises(ValueError, match="variable_msg_type"):
            ProtocolCatalog(payload_sizes={0x10: 2})

    def test_out_of_range_type_is_frame_error(self):
        """超出单字节的消息类型编码时报帧错误"""
        with pytest.raises(FrameError):
            FrameHandler.encode(0x1FF, b"", 4)


class TestFrameHandlerEncode:
    """FrameHandler.encode 测试"""

    def test_zero_payload_frame(self):
        """负载长度为0的消息编码为4字节：起始、设备码、类型、CRC"""
        frame = FrameHandler.encode(MsgType.PING, b"", 4)

        header = bytes([MSG_START, DEVICE_CODE_PC, MsgType.PING])
        assert frame == header + bytes([calc_crc(CRC_LUT, header, 3)])

    @pytest.mark.parametrize("msg_type", [
        t for t in MsgType if t is not MsgType.TELEMETRY
    ])
    def test_fixed_size_frame_length(self, msg_type):
        """固定长度消息的帧长 = 帧头 + 声明长度 + 1"""
        size = MSG_PAYLOAD_SIZES[msg_type]
        capacity = PAYLOAD_START_I + size + 1
        frame = FrameHandler.encode(msg_type, bytes(size), capacity)

        assert len(frame) == capacity
        assert FrameHandler.frame_size(msg_type) == capacity

    def test_layout(self):
        """帧布局：起始字节、设备码、类型、负载原样拷贝、CRC"""
        payload = bytes(range(1, 19))
        frame = FrameHandler.encode(MsgType.CONTROLS, payload, 22)

        assert frame[0] == MSG_START
        assert frame[1] == DEVICE_CODE_PC
        assert frame[2] == MsgType.CONTROLS
        assert frame[3:21] == payload
        assert frame[21] == calc_crc(CRC_LUT, frame, 21)

    def test_accepts_plain_int_msg_type(self):
        """消息类型可以是整数"""
        assert FrameHandler.encode(0x06, b"", 4) == FrameHandler.encode(
            MsgType.ARM_MOTORS, b"", 4
        )

    def test_deterministic(self):
        """相同输入两次编码结果一致"""
        payload = b"\x7f" * 18
        first = FrameHandler.encode(MsgType.CONTROLS, payload, 22)
        second = FrameHandler.encode(MsgType.CONTROLS, payload, 22)
        assert first == second

    def test_payload_change_changes_crc(self):
        """改变任意一个负载字节，CRC随之改变"""
        payload = bytearray(18)
        original = FrameHandler.encode(MsgType.CONTROLS, bytes(payload), 22)[-1]
        for i in range(len(payload)):
            changed = bytearray(payload)
            changed[i] = 0x01
            crc = FrameHandler.encode(MsgType.CONTROLS, bytes(changed), 22)[-1]
            assert crc != original

    def test_capacity_one_byte_short(self):
        """容量少一个字节时拒绝编码而不是截断"""
        with pytest.raises(FrameError, match="缓冲区容量不匹配"):
            FrameHandler.encode(MsgType.CONTROLS, bytes(18), 21)

    def test_capacity_too_large(self):
        """容量多出字节同样拒绝"""
        with pytest.raises(FrameError):
            FrameHandler.encode(MsgType.PING, b"", 5)

    def test_payload_too_short(self):
        """负载短于声明长度时拒绝"""
        with pytest.raises(FrameError, match="负载长度不足"):
            FrameHandler.encode(MsgType.CONTROLS, bytes(10), 22)

    def test_extra_payload_ignored(self):
        """负载超出声明长度的部分不写入帧"""
        frame = FrameHandler.encode(MsgType.SET_MOTOR_DIRS, b"\x01\x02\x03", 5)
        assert frame[3:4] == b"\x01"
        assert len(frame) == 5

    def test_telemetry_variable_size(self):
        """遥测消息按负载中的长度字段确定帧长"""
        payload = telemetry_payload(5)
        capacity = PAYLOAD_START_I + 5 + MAVLINK_SIZE + 1

        frame = FrameHandler.encode(MsgType.TELEMETRY, payload, capacity)

        assert len(frame) == capacity
        assert frame[3:-1] == payload
        assert FrameHandler.frame_size(MsgType.TELEMETRY, payload) == capacity

    def test_custom_catalog(self):
        """使用自定义协议目录编码"""
        catalog = ProtocolCatalog(
            start_byte=0xAA,
            device_code=0x01,
            payload_sizes={0x10: 2},
            variable_msg_type=None,
            crc_table=build_crc_table(0x07),
        )
        frame = FrameHandler.encode(0x10, b"\x12\x34", 6, catalog)

        assert frame[:5] == b"\xaa\x01\x10\x12\x34"
        assert frame[5] == calc_crc(catalog.crc_table, frame, 5)


class TestSendFunctions:
    """发送函数测试"""

    def test_write_all_success(self):
        """完整写入时不报错"""
        port = make_port()
        write_all(port, b"abcd")
        port.write.assert_called_once_with(b"abcd")

    def test_write_all_partial(self):
        """部分写入转为TransportError"""
        port = make_port(written=2)
        with pytest.raises(TransportError, match="部分写入"):
            write_all(port, b"abcd")

    def test_write_all_none_return(self):
        """通道不返回写入字节数时视为成功"""
        port = MagicMock()
        port.write.return_value = None
        write_all(port, b"abcd")

    def test_write_all_serial_exception(self):
        """串口异常转为TransportError并保留描述"""
        port = MagicMock()
        port.write.side_effect = serial.SerialTimeoutException("Write timeout")

        with pytest.raises(TransportError) as exc_info:
            write_all(port, b"abcd")

        assert exc_info.value.kind == TransportError.IO
        assert "Write timeout" in exc_info.value.description

    def test_send_cmd(self):
        """无负载命令写入4字节帧"""
        port = make_port()
        frame = send_cmd(MsgType.ARM_MOTORS, port)

        assert len(frame) == 4
        port.write.assert_called_once_with(frame)

    def test_send_payload_computes_capacity(self):
        """省略容量时按消息类型计算"""
        port = make_port()
        frame = send_payload(MsgType.SET_MOTOR_DIRS, b"\x03", port)

        assert frame == FrameHandler.encode(MsgType.SET_MOTOR_DIRS, b"\x03", 5)
        port.write.assert_called_once_with(frame)

    def test_send_payload_bad_capacity_does_not_write(self):
        """帧参数错误时不写串口"""
        port = make_port()
        with pytest.raises(FrameError):
            send_payload(MsgType.SET_MOTOR_DIRS, b"\x03", port, 4)
        port.write.assert_not_called()

    def test_send_cmd_on_sized_msg_type(self):
        """对有负载的消息调用send_cmd属于调用错误"""
        port = make_port()
        with pytest.raises(FrameError):
            send_cmd(MsgType.CONTROLS, port)
