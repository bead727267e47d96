"""
字节通道接口
============

链路层只依赖"带超时的双工字节通道"这一能力，
serial.Serial 天然满足该接口，测试中可用任意桩对象替代。
"""

from typing import Optional, Protocol


class Channel(Protocol):
    """带读超时的双工字节通道"""

    timeout: Optional[float]

    def write(self, data: bytes) -> Optional[int]:
        ...

    def read(self, size: int = 1) -> bytes:
        ...

    def close(self) -> None:
        ...
