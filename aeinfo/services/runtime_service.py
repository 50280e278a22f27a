"""
Runtime resource usage of this instance, sampled with psutil.

CPU is reported as seconds of CPU time: `total` since the process started,
the rates as CPU seconds consumed per wall-clock second over the trailing
one and ten minute windows. RAM is the resident set size in megabytes.
"""
import asyncio
import os
import time
from collections import deque
from threading import Lock
from typing import Callable, Deque, List, NamedTuple, Optional

import psutil

from aeinfo.core.constants import WINDOW_10M, WINDOW_1M
from aeinfo.core.logger import get_logger
from aeinfo.schemas.info import CPU, RAM, RuntimeStats

logger = get_logger(__name__)

_MB = 1024 * 1024


class Sample(NamedTuple):
    at: float
    cpu_seconds: float
    rss_mb: float


class ProcessRuntimeStats:

    def __init__(
        self,
        process: Optional[psutil.Process] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._process = process or psutil.Process(os.getpid())
        self._clock = clock
        self._samples: Deque[Sample] = deque()
        self._lock = Lock()

    def sample(self) -> Sample:
        """Take one reading and keep it for the rolling windows."""
        cpu = self._process.cpu_times()
        rss = self._process.memory_info().rss
        current = Sample(at=self._clock(), cpu_seconds=cpu.user + cpu.system, rss_mb=rss / _MB)

        with self._lock:
            self._samples.append(current)
            horizon = current.at - WINDOW_10M
            while self._samples and self._samples[0].at < horizon:
                self._samples.popleft()
        return current

    def _window(self, now: float, seconds: int) -> List[Sample]:
        with self._lock:
            return [s for s in self._samples if s.at >= now - seconds]

    @staticmethod
    def _rate(samples: List[Sample]) -> float:
        if len(samples) < 2:
            return 0.0
        first, last = samples[0], samples[-1]
        elapsed = last.at - first.at
        if elapsed <= 0:
            return 0.0
        return max(last.cpu_seconds - first.cpu_seconds, 0.0) / elapsed

    @staticmethod
    def _average(samples: List[Sample]) -> float:
        if not samples:
            return 0.0
        return sum(s.rss_mb for s in samples) / len(samples)

    def snapshot(self) -> RuntimeStats:
        current = self.sample()
        last_1m = self._window(current.at, WINDOW_1M)
        last_10m = self._window(current.at, WINDOW_10M)
        return RuntimeStats(
            cpu=CPU(
                total=current.cpu_seconds,
                rate_1m=self._rate(last_1m),
                rate_10m=self._rate(last_10m),
            ),
            ram=RAM(
                current=current.rss_mb,
                average_1m=self._average(last_1m),
                average_10m=self._average(last_10m),
            ),
        )

    async def stats(self) -> RuntimeStats:
        return await asyncio.to_thread(self.snapshot)


# ---------- SAMPLER ----------

async def runtime_sampler_loop(runtime: ProcessRuntimeStats, interval_seconds: float = 5):
    """
    Loop that records a runtime sample every `interval_seconds` so the
    rolling averages cover the whole window, not only request times.
    """
    logger.info("runtime sampler started, interval=%ss", interval_seconds)
    while True:
        try:
            await asyncio.to_thread(runtime.sample)
        except Exception as e:
            logger.error("runtime sample failed: %s", e, exc_info=True)
        await asyncio.sleep(interval_seconds)
