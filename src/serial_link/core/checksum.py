"""
校验算法模块
============

提供查表法CRC-8校验的实现，查找表由生成多项式推导。
"""

from typing import Sequence, Tuple, Union

from ..config.constants import CRC_POLY

BytesLike = Union[bytes, bytearray, memoryview]


def build_crc_table(poly: int) -> Tuple[int, ...]:
    """
    根据生成多项式构造CRC-8查找表

    高位在前、不反射：每个表项左移8次，移出位为1时异或多项式。

    Args:
        poly: 8位生成多项式（不含最高位的x^8）

    Returns:
        256项查找表

    Raises:
        ValueError: 多项式超出8位范围时抛出

    Examples:
        >>> table = build_crc_table(0x07)
        >>> table[1]
        7
    """
    if not 0 < poly <= 0xFF:
        raise ValueError("多项式必须在1到0xFF之间")

    table = []
    for i in range(256):
        crc = i
        for _ in range(8):
            if crc & 0x80:
                crc = (crc << 1) ^ poly
            else:
                crc <<= 1
        table.append(crc & 0xFF)
    return tuple(table)


def calc_crc(table: Sequence[int], data: BytesLike, length: int) -> int:
    """
    用查找表计算数据前 length 个字节的CRC

    结果与字节顺序相关，交换任意两个不同字节一般会改变结果。

    Args:
        table: 256项CRC查找表
        data: 需要校验的字节数据
        length: 参与计算的字节数

    Returns:
        8位校验值

    Raises:
        TypeError: 当输入不是字节类型时抛出
        ValueError: 当 length 超出数据长度时抛出

    Examples:
        >>> calc_crc(build_crc_table(0x07), b'123456789', 9)
        244
    """
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("输入数据必须是bytes类型")
    if length < 0 or length > len(data):
        raise ValueError(f"校验长度 {length} 超出数据长度 {len(data)}")

    crc = 0
    for byte in data[:length]:
        crc = table[crc ^ byte]
    return crc


CRC_LUT: Tuple[int, ...] = build_crc_table(CRC_POLY)
