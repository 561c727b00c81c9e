"""OS metrics: CPU utilization from tick deltas, memory, swap and disk.

CPU tick counters only grow, so utilization is always computed from the
delta between the two most recent samples. Memory, swap and disk are read
as instantaneous values on each request.
"""

from __future__ import annotations

import asyncio
import logging
import os
import platform
import sys
import time
from dataclasses import dataclass
from pathlib import Path

import psutil

from .models import MemoryUsage

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0
MEMINFO_PATH = Path("/proc/meminfo")
_GUEST_FIELDS = ("guest", "guest_nice")


@dataclass(frozen=True)
class CpuSample:
    used: float
    total: float


def sample_cpu() -> CpuSample:
    """Cumulative ticks since boot, summed over every logical core."""
    used = 0.0
    total = 0.0
    for times in psutil.cpu_times(percpu=True):
        # guest time is already counted in user on Linux
        core_total = sum(
            v for k, v in times._asdict().items() if k not in _GUEST_FIELDS
        )
        total += core_total
        used += core_total - times.idle
    return CpuSample(used=used, total=total)


def utilization(prev: CpuSample, curr: CpuSample) -> float | None:
    """Busy fraction between two samples, or None if no CPU time elapsed."""
    total_delta = curr.total - prev.total
    if total_delta <= 0:
        return None
    rate = (curr.used - prev.used) / total_delta
    return min(1.0, max(0.0, rate))


class CpuSampler:
    """Periodic CPU sampler.

    The run loop is the only writer of ``usage``; status requests just read
    the last computed value and never trigger a sample themselves.
    """

    def __init__(self, sample=sample_cpu) -> None:
        self._sample = sample
        self._baseline: CpuSample | None = None
        self.usage: float | None = None

    def prime(self) -> None:
        self._baseline = self._sample()

    def tick(self) -> float | None:
        current = self._sample()
        if self._baseline is not None:
            rate = utilization(self._baseline, current)
            if rate is not None:
                self.usage = rate
        self._baseline = current
        return self.usage

    async def run(self, interval: float = DEFAULT_INTERVAL_SECONDS) -> None:
        if self._baseline is None:
            self.prime()
        while True:
            await asyncio.sleep(interval)
            try:
                self.tick()
            except Exception as e:
                logger.warning("CPU sample failed: %s", e)


def read_memory() -> MemoryUsage:
    vm = psutil.virtual_memory()
    return MemoryUsage.from_used_total(vm.total - vm.available, vm.total)


def _parse_meminfo(text: str) -> tuple[int, int]:
    """Return (swap_total, swap_free) in bytes from /proc/meminfo text."""
    swap_total = 0
    swap_free = 0
    for line in text.splitlines():
        if line.startswith("SwapTotal:"):
            swap_total = int(line.split()[1]) * 1024
        elif line.startswith("SwapFree:"):
            swap_free = int(line.split()[1]) * 1024
    return swap_total, swap_free


async def read_swap(meminfo: Path = MEMINFO_PATH) -> MemoryUsage:
    """Best-effort swap usage. Degrades to all zeros and never raises."""
    try:
        text = await asyncio.to_thread(meminfo.read_text)
        swap_total, swap_free = _parse_meminfo(text)
        return MemoryUsage.from_used_total(swap_total - swap_free, swap_total)
    except (OSError, ValueError, IndexError) as e:
        logger.debug("Reading %s failed (%s), asking psutil", meminfo, e)

    try:
        swap = psutil.swap_memory()
        return MemoryUsage.from_used_total(swap.used, swap.total)
    except Exception as e:
        logger.debug("Swap info unavailable: %s", e)
        return MemoryUsage()


def root_path() -> str:
    if sys.platform == "win32":
        return os.environ.get("SystemDrive", "C:") + "\\"
    return "/"


def read_disk(path: str | None = None) -> MemoryUsage:
    try:
        usage = psutil.disk_usage(path or root_path())
    except OSError as e:
        logger.debug("Disk usage unavailable: %s", e)
        return MemoryUsage()
    return MemoryUsage.from_used_total(usage.used, usage.total)


def describe_os() -> str:
    """Distro name and release, e.g. ``Ubuntu 24.04``."""
    if sys.platform.startswith("linux"):
        try:
            release = platform.freedesktop_os_release()
            distro = release.get("NAME", "Linux")
            version = release.get("VERSION_ID", "")
            return f"{distro} {version}".strip()
        except OSError:
            pass
    system = platform.system() or sys.platform
    if system == "Darwin":
        return f"macOS {platform.mac_ver()[0]}".strip()
    release = platform.release()
    return f"{system} {release}".strip()


def runtime_versions() -> tuple[str, str]:
    """(python version, implementation name + version)."""
    impl = sys.implementation
    impl_version = ".".join(str(p) for p in impl.version[:3])
    return platform.python_version(), f"{platform.python_implementation()} {impl_version}"


def process_uptime_ms() -> int:
    started = psutil.Process().create_time()
    return max(0, int((time.time() - started) * 1000))
