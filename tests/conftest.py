"""Shared test fixtures for status-image tests."""

from __future__ import annotations

from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from status_image.host import MessageCountRow
from status_image.models import (
    BotInfo,
    BotStatus,
    MemoryUsage,
    MessageStats,
    SystemInfo,
    SystemMetrics,
)


@dataclass
class FakeBot:
    platform: str
    self_id: str
    status: int = BotStatus.ONLINE
    nick: str | None = None
    name: str | None = None
    avatar: str | None = None
    hidden: bool = False

    @property
    def sid(self) -> str:
        return f"{self.platform}:{self.self_id}"


class FakeRegistry:
    def __init__(self, bots: list[FakeBot] | None = None) -> None:
        self.bots = bots or []

    def list_bots(self) -> list[FakeBot]:
        return list(self.bots)


def make_aggregator(rows: list[MessageCountRow] | None = None) -> AsyncMock:
    aggregator = AsyncMock()
    aggregator.aggregate = AsyncMock(return_value=rows or [])
    return aggregator


def make_bot_info(sid: str, status: int = BotStatus.ONLINE, name: str = "") -> BotInfo:
    platform, _ = sid.split(":", 1)
    return BotInfo(
        sid=sid,
        platform=platform,
        status=status,
        name=name or sid,
        avatar=None,
        running_time=3_600_000,
        messages=MessageStats(send=3, receive=7),
    )


@pytest.fixture
def registry() -> FakeRegistry:
    return FakeRegistry(
        [
            FakeBot("onebot", "1001", nick="Alice"),
            FakeBot("discord", "2002", name="Bob"),
            FakeBot("sandbox:x", "3003", name="Tester"),
        ]
    )


@pytest.fixture
def system_metrics() -> SystemMetrics:
    return SystemMetrics(
        os="Ubuntu 24.04",
        python_version="3.12.3",
        implementation="CPython 3.12.3",
        uptime=90_000_000,
        memory=MemoryUsage.from_used_total(6 * 1024**3, 16 * 1024**3),
        swap=MemoryUsage(),
        cpu_usage=0.42,
        disk=MemoryUsage.from_used_total(120 * 1024**3, 512 * 1024**3),
    )


@pytest.fixture
def snapshot(system_metrics: SystemMetrics) -> SystemInfo:
    return SystemInfo(
        bots=(
            make_bot_info("onebot:1001", name="Alice"),
            make_bot_info("discord:2002", BotStatus.RECONNECT, name="Bob"),
            make_bot_info("telegram:3003", 42, name="Carol"),
        ),
        system=system_metrics,
    )
