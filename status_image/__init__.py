"""Bot and host status card plugin."""

from .host import Session
from .models import BotInfo, BotStatus, MessageStats, SystemInfo
from .plugin import CAPABILITY_NAME, StatusImagePlugin
from .selector import NoBotAvailableError, select_primary
from .snapshot import SnapshotService

__all__ = [
    "CAPABILITY_NAME",
    "BotInfo",
    "BotStatus",
    "MessageStats",
    "NoBotAvailableError",
    "Session",
    "SnapshotService",
    "StatusImagePlugin",
    "SystemInfo",
    "select_primary",
]
