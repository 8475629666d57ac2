"""
全局线程池管理

阻塞操作（从磁盘读取模板、同步截图 API 的帧来源）offload 到 I/O 池，
避免阻塞事件循环。检测本身留在处理任务中顺序执行，
保证检测器的"当前帧"状态只被串行访问。
"""
from __future__ import annotations

import asyncio
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from .config import settings
from .logger import logger

_io_pool: Optional[ThreadPoolExecutor] = None


def _auto_io_pool_size() -> int:
    """max(4, cpu_count // 2)，上限 16。"""
    cpu = os.cpu_count() or 4
    return min(max(4, cpu // 2), 16)


def get_io_pool() -> ThreadPoolExecutor:
    """获取 I/O 线程池（首次使用时创建）。"""
    global _io_pool
    if _io_pool is None:
        size = settings.io_thread_pool_size
        if size <= 0:
            size = _auto_io_pool_size()
        _io_pool = ThreadPoolExecutor(
            max_workers=size,
            thread_name_prefix="autoscene-io",
        )
        logger.info("I/O 线程池已创建: max_workers={}", size)
    return _io_pool


async def run_in_io(func, *args):
    """在 I/O 线程池中执行同步函数并 await 结果。"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(get_io_pool(), func, *args)


def shutdown_pools() -> None:
    """关闭线程池；下次使用时重新创建。"""
    global _io_pool
    if _io_pool:
        _io_pool.shutdown(wait=False)
        _io_pool = None
        logger.info("线程池已关闭")
