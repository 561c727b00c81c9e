"""Data models for status snapshots.

A SystemInfo is built fresh for every status request and handed straight to
the template layer; nothing here is persisted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Mapping


class BotStatus(IntEnum):
    """Connection status of a bot, using the host's wire values."""

    OFFLINE = 0
    ONLINE = 1
    CONNECT = 2
    DISCONNECT = 3
    RECONNECT = 4


@dataclass(frozen=True)
class StatusDescriptor:
    key: str
    text: str
    color: str


_STATUS_DESCRIPTORS: dict[BotStatus, StatusDescriptor] = {
    BotStatus.OFFLINE: StatusDescriptor("offline", "Offline", "#8c8fa1"),
    BotStatus.ONLINE: StatusDescriptor("online", "Running", "#40a02b"),
    BotStatus.CONNECT: StatusDescriptor("connect", "Connecting", "#df8e1d"),
    BotStatus.DISCONNECT: StatusDescriptor("disconnect", "Disconnected", "#d20f39"),
    BotStatus.RECONNECT: StatusDescriptor("reconnect", "Reconnecting", "#1e66f5"),
}

UNKNOWN_STATUS = StatusDescriptor("unknown", "Unknown", "#bbbbbb")


def describe_status(status: Any) -> StatusDescriptor:
    """Return display metadata for a status code; unknown codes never fail."""
    try:
        return _STATUS_DESCRIPTORS[BotStatus(status)]
    except (ValueError, TypeError):
        return UNKNOWN_STATUS


_PLATFORM_LABELS = {
    "onebot": "OneBot",
    "qq": "QQ",
    "discord": "Discord",
    "telegram": "Telegram",
    "kook": "KOOK",
    "wechat-official": "WeChat Official",
    "lark": "Lark",
    "dingtalk": "DingTalk",
    "line": "LINE",
    "slack": "Slack",
    "whatsapp": "WhatsApp",
    "milky": "Milky",
}

SANDBOX_PREFIX = "sandbox:"


def platform_label(platform: str) -> str:
    """Human-readable platform name; unknown platforms pass through."""
    plain = platform.removeprefix(SANDBOX_PREFIX)
    return _PLATFORM_LABELS.get(plain, plain)


@dataclass
class MessageStats:
    """Message counts for one bot over one day bucket."""

    send: int = 0
    receive: int = 0

    @classmethod
    def from_counts(cls, counts: Mapping[str, int | None] | None) -> MessageStats:
        counts = counts or {}
        return cls(
            send=counts.get("send") or 0,
            receive=counts.get("receive") or 0,
        )


@dataclass(frozen=True)
class MemoryUsage:
    """Used/total bytes plus a 0-1 fraction. Also used for swap and disk."""

    used: int = 0
    total: int = 0
    percentage: float = 0.0

    @classmethod
    def from_used_total(cls, used: int, total: int) -> MemoryUsage:
        if total <= 0:
            return cls()
        used = max(0, min(used, total))
        return cls(used=used, total=total, percentage=used / total)


@dataclass(frozen=True)
class BotInfo:
    sid: str
    platform: str
    status: int
    name: str
    avatar: str | None
    running_time: int  # milliseconds
    messages: MessageStats = field(default_factory=MessageStats)

    def to_dict(self) -> dict:
        return {
            "sid": self.sid,
            "platform": self.platform,
            "status": int(self.status),
            "name": self.name,
            "avatar": self.avatar,
            "runningTime": self.running_time,
            "messages": {
                "send": self.messages.send,
                "receive": self.messages.receive,
            },
        }


@dataclass(frozen=True)
class SystemMetrics:
    os: str
    python_version: str
    implementation: str
    uptime: int  # milliseconds
    memory: MemoryUsage
    swap: MemoryUsage
    cpu_usage: float | None
    disk: MemoryUsage = field(default_factory=MemoryUsage)


@dataclass(frozen=True)
class SystemInfo:
    """Status snapshot for a single request."""

    bots: tuple[BotInfo, ...]
    system: SystemMetrics

    def to_dict(self) -> dict:
        """JSON-friendly form for plugins consuming the capability."""
        s = self.system
        return {
            "bots": [b.to_dict() for b in self.bots],
            "system": {
                "os": s.os,
                "pythonVersion": s.python_version,
                "implementation": s.implementation,
                "uptime": s.uptime,
                "memory": _usage_dict(s.memory),
                "swap": _usage_dict(s.swap),
                "disk": _usage_dict(s.disk),
                "cpu": {"usage": s.cpu_usage},
            },
        }


def _usage_dict(usage: MemoryUsage) -> dict:
    return {
        "used": usage.used,
        "total": usage.total,
        "percentage": usage.percentage,
    }
