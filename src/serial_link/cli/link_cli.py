"""
链路诊断命令行接口
==================

列出串口识别结果、探测设备连接、发送单帧命令。
"""

from typing import Dict, Iterable, Union

from ..config.constants import MsgType
from ..config.settings import LinkConfig
from ..core.connection_manager import ConnectionManager
from ..core.errors import FrameError, LinkError
from ..core.link_state import LinkState
from ..utils.logger import get_logger
from ..utils.retry import retry_call

logger = get_logger(__name__)


def parse_msg_type(text: str) -> Union[MsgType, int]:
    """
    解析消息类型

    Args:
        text: 枚举名（如 ping、ARM_MOTORS）或整数（如 6、0x06）

    Returns:
        MsgType枚举，未定义的数值原样返回整数

    Raises:
        ValueError: 无法解析时抛出
    """
    name = text.strip().upper()
    if name in MsgType.__members__:
        return MsgType[name]

    try:
        value = int(text, 0)
    except ValueError:
        raise ValueError(f"无效的消息类型: {text}") from None
    if not 0 <= value <= 0xFF:
        raise ValueError(f"消息类型超出单字节范围: {text}")
    try:
        return MsgType(value)
    except ValueError:
        return value


def parse_payload(text: str) -> bytes:
    """解析十六进制负载，允许空格分隔，如 '01 02 ff'"""
    cleaned = "".join(text.split())
    try:
        return bytes.fromhex(cleaned)
    except ValueError:
        raise ValueError(f"无效的十六进制负载: {text}") from None


def parse_alt_bauds(items: Iterable[str]) -> Dict[str, int]:
    """解析 KEYWORD=BAUD 形式的厂商波特率覆盖"""
    result: Dict[str, int] = {}
    for item in items:
        keyword, sep, baud = item.partition("=")
        if not sep or not keyword.strip():
            raise ValueError(f"格式应为 KEYWORD=BAUD: {item}")
        try:
            result[keyword.strip()] = int(baud)
        except ValueError:
            raise ValueError(f"无效的波特率: {item}") from None
    return result


class LinkCLI:
    """链路诊断命令行接口"""

    @staticmethod
    def list_ports(config: LinkConfig) -> bool:
        """显示可用的串口及识别结果"""
        ConnectionManager.print_available_ports(
            config.usb_serial_number, config.baud_table
        )
        return True

    @staticmethod
    def probe(config: LinkConfig, retries: int = 0, backoff: float = 0.5) -> bool:
        """
        探测并打开设备

        Args:
            config: 链路配置
            retries: 未发现设备时的重试次数
            backoff: 指数退避基础时间(秒)

        Returns:
            是否连接成功
        """
        state = LinkState(config)
        try:
            connected = retry_call(
                state.connect, max_retry=retries, base_delay=backoff, logger=logger
            )
            status = state.connection_status
            print(f"状态: {status.as_str()}")

            if not connected:
                if state.last_error is not None:
                    print(f"错误: {state.last_error.kind} - {state.last_error.description}")
                return False

            interface = state.interface
            print(f"串口: {interface.port_name}")
            print(f"类型: {interface.connection_type}")
            print(f"波特率: {interface.baudrate}")
            return True
        finally:
            state.disconnect()

    @staticmethod
    def send(
        config: LinkConfig, msg_type: Union[MsgType, int], payload: bytes = b""
    ) -> bool:
        """
        发送单帧

        Args:
            config: 链路配置
            msg_type: 消息类型
            payload: 负载数据

        Returns:
            是否发送成功
        """
        state = LinkState(config)
        try:
            frame = state.send(msg_type, payload)
            print(f"已发送 {len(frame)} 字节: {frame.hex(' ')}")
            return True
        except FrameError as e:
            print(f"帧参数错误: {e}")
            return False
        except LinkError as e:
            logger.error(f"发送失败: {e}")
            print(f"发送失败: {e}")
            return False
        finally:
            state.disconnect()
