"""Interfaces the host chat framework provides to the plugin.

The plugin never talks to a chat platform directly. It reads live bots from
a registry, aggregates message counts through a query source and hands
finished HTML to a rendering service, all supplied by the host.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable, Protocol


class HostBot(Protocol):
    """A live bot connection as enumerated by the host."""

    sid: str  # "platform:selfId"
    platform: str
    status: int
    nick: str | None
    name: str | None
    avatar: str | None
    hidden: bool


@dataclass(frozen=True)
class MessageCountRow:
    """One grouped row of the message aggregation query."""

    type: str
    platform: str
    self_id: str
    count: int


class BotRegistry(Protocol):
    def list_bots(self) -> Iterable[HostBot]: ...


class MessageAggregator(Protocol):
    async def aggregate(self, start: int, end: int) -> list[MessageCountRow]:
        """Summed counts grouped by (type, platform, self_id) for
        date numbers in ``[start, end)``."""
        ...


class HtmlRenderer(Protocol):
    async def render(self, html: str) -> bytes: ...


@dataclass(frozen=True)
class Session:
    """The request context a status command was issued from."""

    platform: str
    self_id: str

    @property
    def sid(self) -> str:
        return f"{self.platform}:{self.self_id}"


class Host(Protocol):
    registry: BotRegistry
    aggregator: MessageAggregator
    renderer: HtmlRenderer | None

    def provide(self, name: str, capability: Callable[..., Awaitable[Any]]) -> None: ...
