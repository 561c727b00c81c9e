"""Turns the host's live bot connections into BotInfo values."""

from __future__ import annotations

import time
from typing import Callable, Iterable, Mapping

from .host import BotRegistry, HostBot
from .models import SANDBOX_PREFIX, BotInfo, MessageStats
from .sampler import process_uptime_ms


def _now_ms() -> int:
    return int(time.time() * 1000)


def first_defined(*candidates: str | None) -> str:
    """First candidate that is not None and not empty, else ``""``."""
    for candidate in candidates:
        if candidate:
            return candidate
    return ""


def is_visible(bot: HostBot, requesting_platform: str | None) -> bool:
    """Hidden bots never show; sandbox bots only show to sandbox requests."""
    if bot.hidden:
        return False
    if bot.platform.startswith(SANDBOX_PREFIX):
        return not requesting_platform or requesting_platform.startswith(SANDBOX_PREFIX)
    return True


class BotRegistryAdapter:
    """Enumerates visible bots and resolves their names and running times.

    Login timestamps are recorded from the host's "login added" event and
    overwritten on every reconnect.
    """

    def __init__(
        self,
        registry: BotRegistry,
        display_names: Mapping[str, str] | None = None,
        clock: Callable[[], int] = _now_ms,
        uptime: Callable[[], int] = process_uptime_ms,
    ) -> None:
        self._registry = registry
        self._display_names = dict(display_names or {})
        self._clock = clock
        self._uptime = uptime
        self._login_started: dict[str, int] = {}

    def on_login_added(self, sid: str, timestamp_ms: int) -> None:
        self._login_started[sid] = timestamp_ms

    def resolve_name(self, bot: HostBot) -> str:
        # An override wins even when it is an empty string.
        if bot.sid in self._display_names:
            return self._display_names[bot.sid]
        return first_defined(bot.nick, bot.name)

    def running_time(self, sid: str, now_ms: int | None = None) -> int:
        """Milliseconds since login, or process uptime if login was not seen.

        The uptime fallback overstates bots that connected after the process
        started.
        """
        started = self._login_started.get(sid)
        if started is None:
            return self._uptime()
        if now_ms is None:
            now_ms = self._clock()
        return max(0, now_ms - started)

    def list_bots(
        self,
        requesting_platform: str | None = None,
        stats: Mapping[str, MessageStats] | None = None,
    ) -> list[BotInfo]:
        stats = stats or {}
        now = self._clock()
        bots: list[BotInfo] = []
        for bot in self._visible(requesting_platform):
            messages = stats.get(bot.sid)
            bots.append(
                BotInfo(
                    sid=bot.sid,
                    platform=bot.platform,
                    status=bot.status,
                    name=self.resolve_name(bot),
                    avatar=bot.avatar,
                    running_time=self.running_time(bot.sid, now),
                    messages=MessageStats(messages.send, messages.receive)
                    if messages
                    else MessageStats(),
                )
            )
        return bots

    def _visible(self, requesting_platform: str | None) -> Iterable[HostBot]:
        return (b for b in self._registry.list_bots() if is_visible(b, requesting_platform))
