"""
异常定义
========

链路层的异常体系。

"没有找到设备"是常态，不属于异常，见 DiscoveryResult。
"""


class LinkError(Exception):
    """链路层异常基类"""


class NotConnectedError(LinkError, ConnectionError):
    """当前没有可用的串口连接"""

    def __init__(self, message: str = "未连接设备"):
        super().__init__(message)


class TransportError(LinkError, IOError):
    """
    串口传输错误

    打开或写入串口时发生的权限、占用、I/O等错误，
    保留错误类别和底层描述。
    """

    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    BUSY = "busy"
    IO = "io"

    def __init__(self, kind: str, description: str):
        super().__init__(f"{kind}: {description}")
        self.kind = kind
        self.description = description

    @property
    def is_not_found(self) -> bool:
        """设备不存在或在枚举过程中消失"""
        return self.kind == self.NOT_FOUND


class FrameError(LinkError, ValueError):
    """数据帧构造的前置条件不满足（调用方错误）"""
