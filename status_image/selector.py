"""Picks the bot shown front and center on a status card."""

from __future__ import annotations

from typing import Sequence

from .models import BotInfo


class NoBotAvailableError(LookupError):
    """Raised when there is no bot to put on the status card."""


def select_primary(
    bots: Sequence[BotInfo],
    requesting_sid: str | None = None,
    requesting_platform: str | None = None,
) -> tuple[BotInfo, list[BotInfo]]:
    """Return ``(primary, ordered)``.

    The primary is the bot whose identity matches the requesting session,
    else the first bot on the requesting platform, else the first bot.
    ``ordered`` starts with the primary; the rest keep their order.
    """
    if not bots:
        raise NoBotAvailableError("No bot available")

    primary = None
    if requesting_sid:
        primary = next((b for b in bots if b.sid == requesting_sid), None)
    if primary is None and requesting_platform:
        primary = next((b for b in bots if b.platform == requesting_platform), None)
    if primary is None:
        primary = bots[0]

    ordered = [primary] + [b for b in bots if b is not primary]
    return primary, ordered
