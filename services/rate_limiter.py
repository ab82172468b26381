"""
滑动窗口限流器

每个客户端维护窗口内的请求时间戳列表；
所有对共享字典的读写都由同一把锁串行化（检查路径本身也会裁剪列表）
"""
import asyncio
import logging
import math
import threading
import time
from typing import Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)


class SlidingWindowRateLimiter:
    """
    滑动窗口限流器

    实例由应用持有（app.state），测试可以各自构造互不干扰的实例
    """

    def __init__(
        self,
        limit: int = 100,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            limit: 窗口内允许的最大请求数
            window_seconds: 窗口长度（秒）
            clock: 时间源（单调时钟，测试中可替换）
        """
        if limit < 0:
            raise ValueError("limit must be >= 0")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be > 0")

        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    @property
    def retry_after(self) -> int:
        """被拒绝时建议的重试间隔（整秒）"""
        return max(1, math.ceil(self.window_seconds))

    def _prune(self, timestamps: List[float], now: float) -> List[float]:
        return [ts for ts in timestamps if now - ts <= self.window_seconds]

    def allow(self, key: str) -> bool:
        """
        记录一次请求并判断是否放行

        Args:
            key: 客户端标识（通常是 IP）

        Returns:
            True 如果放行，False 如果超出限额
        """
        with self._lock:
            now = self._clock()
            valid = self._prune(self._requests.get(key, []), now)

            if len(valid) >= self.limit:
                self._requests[key] = valid
                return False

            valid.append(now)
            self._requests[key] = valid
            return True

    def cleanup(self) -> int:
        """
        裁剪所有客户端的过期时间戳，删除已经为空的客户端

        Returns:
            删除的客户端数量
        """
        removed = 0
        with self._lock:
            now = self._clock()
            for key in list(self._requests):
                valid = self._prune(self._requests[key], now)
                if valid:
                    self._requests[key] = valid
                else:
                    del self._requests[key]
                    removed += 1
        if removed:
            logger.debug(f"Rate limiter cleanup removed {removed} idle clients")
        return removed

    def tracked_keys(self) -> List[str]:
        """当前仍在跟踪的客户端"""
        with self._lock:
            return list(self._requests)

    async def start_cleanup_daemon(self, interval_seconds: Optional[float] = None) -> None:
        """
        启动清理守护任务（每个窗口执行一次）

        Args:
            interval_seconds: 清理间隔，默认等于窗口长度
        """
        interval = interval_seconds or self.window_seconds
        logger.info(f"Starting rate limiter cleanup daemon (interval={interval}s)")

        while True:
            try:
                await asyncio.sleep(interval)
                self.cleanup()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Rate limiter cleanup error: {e}", exc_info=True)


def client_key(headers: Mapping[str, str], remote_addr: Optional[str]) -> str:
    """
    提取客户端标识

    优先级：X-Forwarded-For 第一项 > X-Real-IP > 连接地址（去掉端口）

    Args:
        headers: 请求头（大小写不敏感的映射）
        remote_addr: 连接地址，可能带端口
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip

    addr = remote_addr or ""
    if ":" in addr:
        addr = addr[:addr.rindex(":")]
    return addr
