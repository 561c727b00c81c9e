"""Plugin facade wiring the snapshot service to a host framework.

The host calls ``on_ready`` once it is up, ``on_login_added`` whenever a bot
connection is established and ``render_status`` for the status command.
``status-image.getSystemInfo`` is registered for other plugins.
"""

from __future__ import annotations

import logging
import random

from .card_renderer import build_status_card
from .config import PluginConfig
from .host import Host, Session
from .models import SystemInfo
from .selector import select_primary
from .snapshot import SnapshotService
from .template import HTML_THEMES, TemplateOptions, generate

logger = logging.getLogger(__name__)

CAPABILITY_NAME = "status-image.getSystemInfo"


class StatusImagePlugin:
    def __init__(self, host: Host, config: PluginConfig | None = None) -> None:
        self._host = host
        self._config = config or PluginConfig()
        self.snapshots = SnapshotService(
            host.registry,
            host.aggregator,
            display_names=self._config.display_names(),
            sample_interval=self._config.cpu_sample_interval_seconds,
        )
        host.provide(CAPABILITY_NAME, self.get_system_info)

    @property
    def theme(self) -> str:
        if self._config.theme:
            return self._config.theme
        return "default" if self._host.renderer is not None else "card"

    async def on_ready(self) -> None:
        await self.snapshots.start()

    async def on_dispose(self) -> None:
        await self.snapshots.stop()

    def on_login_added(self, sid: str, timestamp_ms: int) -> None:
        logger.debug("Login added: %s at %d", sid, timestamp_ms)
        self.snapshots.on_login_added(sid, timestamp_ms)

    async def get_system_info(self, platform: str | None = None) -> SystemInfo:
        return await self.snapshots.build_snapshot(platform)

    def pick_background(self) -> str | None:
        if not self._config.background:
            return None
        return random.choice(self._config.background)

    async def render_status(self, session: Session) -> bytes:
        """Build a snapshot for ``session`` and render it to an image.

        Raises NoBotAvailableError when no bot is visible, and lets
        aggregation source failures through unchanged.
        """
        snapshot = await self.snapshots.build_snapshot(session.platform)
        theme = self.theme

        if theme == "card":
            if self._config.background:
                logger.debug("Card theme draws its own backdrop; background list ignored")
            primary, ordered = select_primary(snapshot.bots, session.sid, session.platform)
            card = build_status_card(
                snapshot, primary, ordered, "dark" if self._config.dark_mode else "light"
            )
            return card.getvalue()

        if theme not in HTML_THEMES:
            raise ValueError(f"Unknown theme: {theme}")
        if self._host.renderer is None:
            raise RuntimeError(f"Theme {theme!r} needs an HTML rendering service")

        html = generate(
            theme,
            TemplateOptions(
                snapshot=snapshot,
                background=self.pick_background(),
                active_sid=session.sid,
                active_platform=session.platform,
                mask_opacity=self._config.mask_opacity,
                dark_mode=self._config.dark_mode,
            ),
        )
        return await self._host.renderer.render(html)
