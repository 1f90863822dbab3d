#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
线程池执行器 - 批量验证/修复共用的全局线程池

单条记录的计算是纯函数、无共享可变状态，可以任意并行。
"""

import asyncio
import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Any, Callable, Optional

from birth_engine.config.app_config import get_config

logger = logging.getLogger(__name__)

_executor: Optional[ThreadPoolExecutor] = None
_executor_lock = threading.Lock()


def get_executor() -> ThreadPoolExecutor:
    """
    获取全局线程池执行器（单例模式）

    线程数取自 EngineConfig.batch_max_workers
    """
    global _executor
    if _executor is None:
        with _executor_lock:
            if _executor is None:
                max_workers = get_config().batch_max_workers
                _executor = ThreadPoolExecutor(
                    max_workers=max_workers,
                    thread_name_prefix="birth_engine"
                )
                logger.info(f"✓ 批处理线程池已创建 (max_workers={max_workers})")
    return _executor


async def run_in_executor(func: Callable, *args, executor: Optional[Executor] = None, **kwargs) -> Any:
    """在线程池中执行同步函数，供异步调用方使用（默认使用全局线程池）"""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(executor or get_executor(), lambda: func(*args, **kwargs))


def shutdown_executor():
    """关闭线程池执行器（用于优雅关闭）"""
    global _executor
    with _executor_lock:
        if _executor is not None:
            _executor.shutdown(wait=True)
            _executor = None
            logger.info("✓ 批处理线程池已关闭")
