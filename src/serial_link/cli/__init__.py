"""
命令行接口模块
==============

提供串口识别、设备探测和单帧发送的命令行接口。
"""

from .link_cli import LinkCLI

__all__ = [
    "LinkCLI"
]
