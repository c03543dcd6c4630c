"""Grouped, rate-limited batch execution."""

import asyncio
import math
import time
from collections.abc import Awaitable, Callable, Hashable, Iterable
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from loguru import logger

from marketlens.core.http import TokenBucket
from marketlens.core.models import Absent, AbsenceReason, Outcome, Present

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


@dataclass
class BatchResult(Generic[K]):
    """批量处理结果."""

    outcomes: dict[K, Outcome] = field(default_factory=dict)
    group_count: int = 0
    total_time_seconds: float = 0.0

    @property
    def success_count(self) -> int:
        return sum(1 for outcome in self.outcomes.values() if isinstance(outcome, Present))

    @property
    def failure_count(self) -> int:
        return len(self.outcomes) - self.success_count

    def present(self) -> dict[K, Any]:
        """Values of the successful items, in input order."""
        return {key: outcome.value for key, outcome in self.outcomes.items() if isinstance(outcome, Present)}


class BatchScheduler:
    """Run items in consecutive groups of ``concurrency``.

    A group runs concurrently and fully settles before the next one starts;
    ``inter_batch_delay`` seconds separate groups. A failing item becomes
    ``Absent(unavailable)`` without affecting its siblings.
    """

    def __init__(
        self,
        concurrency: int = 5,
        inter_batch_delay: float = 0.5,
        rate_limiter: TokenBucket | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        source_id: str = "batch",
    ):
        """初始化批处理调度器.

        Args:
            concurrency: 每组并发数量
            inter_batch_delay: 组间延迟(秒), 最后一组之后不等待
            rate_limiter: 可选令牌桶, 每个条目调用前获取一个令牌
            sleep: 可注入的休眠函数
            source_id: 非 Outcome 返回值的来源标识
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        if inter_batch_delay < 0:
            raise ValueError("inter_batch_delay must be non-negative")
        self.concurrency = concurrency
        self.inter_batch_delay = inter_batch_delay
        self.rate_limiter = rate_limiter
        self._sleep = sleep
        self.source_id = source_id

    def group_count(self, item_count: int) -> int:
        return math.ceil(item_count / self.concurrency) if item_count else 0

    async def _run_one(self, item: T, worker: Callable[[T], Awaitable[Any]]) -> Outcome:
        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()
        result = await worker(item)
        if isinstance(result, Present | Absent):
            return result
        if result is None:
            return Absent(reason=AbsenceReason.MISSING)
        return Present(value=result, source_id=self.source_id)

    async def run(
        self,
        items: Iterable[T],
        worker: Callable[[T], Awaitable[Any]],
        key: Callable[[T], K] | None = None,
    ) -> BatchResult[K]:
        """Process ``items`` with ``worker``.

        ``worker`` may return a value (wrapped as ``Present``), ``None``
        (``Absent(missing)``) or an ``Outcome``. Results are keyed by
        ``key(item)``, or by the item itself.
        """
        key_fn: Callable[[T], Any] = key or (lambda item: item)
        unique: dict[Any, T] = {}
        for item in items:
            unique.setdefault(key_fn(item), item)
        keyed = list(unique.items())

        start = time.monotonic()
        result: BatchResult[K] = BatchResult(group_count=self.group_count(len(keyed)))
        logger.info(f"Starting batch processing with {len(keyed)} items in {result.group_count} groups")

        for offset in range(0, len(keyed), self.concurrency):
            group = keyed[offset : offset + self.concurrency]
            settled = await asyncio.gather(*(self._run_one(item, worker) for _, item in group), return_exceptions=True)
            for (item_key, _), outcome in zip(group, settled, strict=True):
                if isinstance(outcome, BaseException):
                    if isinstance(outcome, asyncio.CancelledError | KeyboardInterrupt | SystemExit):
                        raise outcome
                    logger.warning(f"Batch item {item_key} failed: {type(outcome).__name__}: {outcome}")
                    outcome = Absent(reason=AbsenceReason.UNAVAILABLE, detail=str(outcome))
                result.outcomes[item_key] = outcome
            if offset + self.concurrency < len(keyed) and self.inter_batch_delay > 0:
                await self._sleep(self.inter_batch_delay)

        result.total_time_seconds = time.monotonic() - start
        logger.info(
            f"Batch processing completed: {result.success_count} successful, "
            f"{result.failure_count} failed in {result.total_time_seconds:.2f} seconds"
        )
        return result
