"""Telegram host for the status plugin.

Exposes the daemon's own Telegram bot as the single entry of the bot
registry, records message traffic in a SQLite log and answers
/status_image with a rendered card.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from telegram import Update
from telegram.constants import ParseMode
from telegram.ext import Application, CommandHandler, ContextTypes, MessageHandler, filters

from .config import DaemonConfig
from .host import HtmlRenderer, Session
from .message_log import MessageLog
from .models import BotStatus
from .plugin import StatusImagePlugin
from .selector import NoBotAvailableError

logger = logging.getLogger(__name__)

PLATFORM = "telegram"


@dataclass
class TelegramBotEntry:
    """Registry view of the daemon's own bot."""

    self_id: str
    nick: str | None
    name: str | None
    status: int = BotStatus.OFFLINE
    avatar: str | None = None
    hidden: bool = False
    platform: str = PLATFORM

    @property
    def sid(self) -> str:
        return f"{self.platform}:{self.self_id}"


class TelegramHost:
    """Telegram application acting as host framework for StatusImagePlugin."""

    renderer: HtmlRenderer | None = None

    def __init__(self, config: DaemonConfig) -> None:
        self._entry: TelegramBotEntry | None = None
        self.capabilities: dict[str, Callable[..., Awaitable[Any]]] = {}
        self.aggregator = MessageLog(config.message_log_path)
        self.registry = self

        self._app = Application.builder().token(config.telegram.bot_token).build()
        # Group -1 sees every message before the command handlers run.
        self._app.add_handler(MessageHandler(filters.ALL, self._count_incoming), group=-1)
        self._app.add_handler(CommandHandler("status_image", self._cmd_status))
        self._app.add_handler(CommandHandler("help", self._cmd_help))

        self.plugin = StatusImagePlugin(self, config.plugin)

    # --- Host interface ---

    def provide(self, name: str, capability: Callable[..., Awaitable[Any]]) -> None:
        self.capabilities[name] = capability

    def list_bots(self) -> list[TelegramBotEntry]:
        return [self._entry] if self._entry else []

    # --- Lifecycle ---

    async def start(self) -> None:
        """Start the Telegram bot polling loop."""
        await self._app.initialize()
        me = self._app.bot
        self._entry = TelegramBotEntry(
            self_id=str(me.id),
            nick=me.first_name,
            name=me.username,
            status=BotStatus.CONNECT,
        )
        await self.plugin.on_ready()
        await self._app.start()
        await self._app.updater.start_polling()
        self._entry.status = BotStatus.ONLINE
        self.plugin.on_login_added(self._entry.sid, int(time.time() * 1000))
        logger.info("Telegram bot @%s polling started", me.username)

    async def stop(self) -> None:
        """Stop the Telegram bot."""
        if self._entry:
            self._entry.status = BotStatus.DISCONNECT
        try:
            await self._app.updater.stop()
            await self._app.stop()
            await self._app.shutdown()
            logger.info("Telegram bot stopped")
        except Exception as e:
            logger.error("Error stopping Telegram bot: %s", e)
        await self.plugin.on_dispose()
        self.aggregator.close()
        if self._entry:
            self._entry.status = BotStatus.OFFLINE

    # --- Handlers ---

    async def _count_incoming(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if self._entry and update.effective_message:
            await self.aggregator.record("receive", PLATFORM, self._entry.self_id)

    async def _cmd_status(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        """Handle /status_image — reply with the rendered status card."""
        if not update.message or not self._entry:
            return

        session = Session(platform=PLATFORM, self_id=self._entry.self_id)
        try:
            image = await self.plugin.render_status(session)
        except NoBotAvailableError:
            await self._reply_text(update, "no bot available")
            return
        except Exception as e:
            logger.error("Failed to render status card: %s", e)
            await self._reply_text(update, "status is unavailable right now")
            return

        try:
            await update.message.reply_photo(photo=image)
        except Exception as e:
            logger.error("Failed to send status card: %s", e)
            return
        await self.aggregator.record("send", PLATFORM, self._entry.self_id)

    async def _cmd_help(
        self, update: Update, context: ContextTypes.DEFAULT_TYPE
    ) -> None:
        if not update.message:
            return
        msg = (
            "/status_image — bot and host status card\n"
            "/help — this message"
        )
        await self._reply_text(update, msg)

    async def _reply_text(self, update: Update, text: str) -> None:
        try:
            await update.message.reply_text(text, parse_mode=ParseMode.HTML)
        except Exception as e:
            logger.error("Failed to send Telegram message: %s", e)
            return
        if self._entry:
            await self.aggregator.record("send", PLATFORM, self._entry.self_id)
