"""Snapshot service — owns the process-wide state and builds SystemInfo.

The CPU sampler, the message count cache and the login timestamps all live
on one SnapshotService instance created by the plugin.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Mapping

from .host import BotRegistry, MessageAggregator
from .message_cache import MessageCountCache, date_number
from .models import SystemInfo, SystemMetrics
from .registry import BotRegistryAdapter
from .sampler import (
    DEFAULT_INTERVAL_SECONDS,
    CpuSampler,
    describe_os,
    process_uptime_ms,
    read_disk,
    read_memory,
    read_swap,
    runtime_versions,
)

logger = logging.getLogger(__name__)


class SnapshotService:
    def __init__(
        self,
        registry: BotRegistry,
        aggregator: MessageAggregator,
        display_names: Mapping[str, str] | None = None,
        sample_interval: float = DEFAULT_INTERVAL_SECONDS,
        sampler: CpuSampler | None = None,
        today: Callable[[], int] = date_number,
    ) -> None:
        self.sampler = sampler or CpuSampler()
        self.messages = MessageCountCache(aggregator)
        self.bots = BotRegistryAdapter(
            registry, display_names, uptime=process_uptime_ms
        )
        self._sample_interval = sample_interval
        self._today = today
        self._sampler_task: asyncio.Task | None = None
        self._os: str | None = None

    @property
    def os(self) -> str:
        if self._os is None:
            self._os = describe_os()
        return self._os

    async def start(self) -> None:
        """Warm the caches, prime the CPU baseline and start sampling.

        The sampler task only starts once the warm-up succeeded, and a
        second call while it runs is a no-op.
        """
        if self._sampler_task is not None:
            return
        self._os = await asyncio.to_thread(describe_os)
        await self.messages.ensure_fresh(self._today())
        self.sampler.prime()
        self._sampler_task = asyncio.create_task(
            self.sampler.run(self._sample_interval)
        )
        logger.info("Snapshot service started (os: %s)", self._os)

    async def stop(self) -> None:
        if self._sampler_task is None:
            return
        self._sampler_task.cancel()
        try:
            await self._sampler_task
        except asyncio.CancelledError:
            pass
        self._sampler_task = None

    def on_login_added(self, sid: str, timestamp_ms: int) -> None:
        self.bots.on_login_added(sid, timestamp_ms)

    async def build_snapshot(self, requesting_platform: str | None = None) -> SystemInfo:
        """Assemble a complete snapshot or raise; never a partial one."""
        stats = await self.messages.ensure_fresh(self._today())
        bots = self.bots.list_bots(requesting_platform, stats)

        python_version, implementation = runtime_versions()
        system = SystemMetrics(
            os=self.os,
            python_version=python_version,
            implementation=implementation,
            uptime=process_uptime_ms(),
            memory=read_memory(),
            swap=await read_swap(),
            cpu_usage=self.sampler.usage,
            disk=read_disk(),
        )
        return SystemInfo(bots=tuple(bots), system=system)

    get_system_info = build_snapshot
