"""重试与退避工具
====================

链路层内部从不重试；这里的工具供调用方（命令行、轮询循环）
按指数退避反复尝试连接。
"""

from __future__ import annotations

import time
import random
from typing import Callable, Optional, TypeVar

_T = TypeVar("_T")


def exponential_backoff(
    base: float, attempt: int, jitter_ratio: float = 0.1, max_delay: float = 5.0
) -> float:
    """计算指数退避时间

    Args:
        base: 基础延时（秒）
        attempt: 第 *attempt* 次重试（从 0 开始）
        jitter_ratio: 抖动比例，默认 10%
        max_delay: 抖动前的延时上限（秒）

    Returns:
        等待时间，秒
    """
    delay = min(base * (2 ** attempt), max_delay)
    jitter = random.uniform(0, delay * jitter_ratio)
    return delay + jitter


def retry_call(
    func: Callable[[], _T],
    *,
    max_retry: int,
    base_delay: float,
    logger=None,
    sleep: Optional[Callable[[float], None]] = None,
) -> _T | None:
    """带退避的同步重试调用

    Args:
        func: 无参可调用对象，返回真值即视为成功
        max_retry: 最大重试次数
        base_delay: 指数退避基础时间，秒
        logger: 可选日志记录器
        sleep: 等待函数，默认 time.sleep

    Returns:
        func 的返回值，若始终失败则返回 None
    """
    if max_retry < 0:
        raise ValueError("max_retry不能为负数")

    for attempt in range(max_retry + 1):
        result = func()
        if result:
            return result
        if attempt == max_retry:
            break
        wait = exponential_backoff(base_delay, attempt)
        if logger:
            logger.debug(f"第{attempt + 1}次尝试失败，{wait:.2f}s 后重试")
        (sleep or time.sleep)(wait)
    return None
