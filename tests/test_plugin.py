"""Tests for the plugin facade."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from status_image.config import PluginConfig
from status_image.host import Session
from status_image.models import MemoryUsage
from status_image.plugin import CAPABILITY_NAME, StatusImagePlugin
from status_image.selector import NoBotAvailableError

from .conftest import FakeBot, FakeRegistry, make_aggregator

PNG_MAGIC = b"\x89PNG"


class FakeHost:
    def __init__(self, bots: list[FakeBot], renderer=None) -> None:
        self.registry = FakeRegistry(bots)
        self.aggregator = make_aggregator()
        self.renderer = renderer
        self.capabilities: dict = {}

    def provide(self, name, capability) -> None:
        self.capabilities[name] = capability


@pytest.fixture(autouse=True)
def system_reads():
    with patch("status_image.snapshot.read_memory", return_value=MemoryUsage.from_used_total(1, 2)), \
            patch("status_image.snapshot.read_swap", new=AsyncMock(return_value=MemoryUsage())), \
            patch("status_image.snapshot.read_disk", return_value=MemoryUsage()), \
            patch("status_image.snapshot.describe_os", return_value="TestOS"):
        yield


def _bots() -> list[FakeBot]:
    return [FakeBot("onebot", "1", nick="Alice"), FakeBot("discord", "2", name="Bob")]


class TestCapability:
    @pytest.mark.asyncio
    async def test_registered(self) -> None:
        host = FakeHost(_bots())
        plugin = StatusImagePlugin(host)
        assert host.capabilities[CAPABILITY_NAME] == plugin.get_system_info

        info = await host.capabilities[CAPABILITY_NAME]("discord")
        assert [b.name for b in info.bots] == ["Alice", "Bob"]

    def test_display_names_applied(self) -> None:
        host = FakeHost(_bots())
        config = PluginConfig(display_name=[{"sid": "discord:2", "name": "Robert"}])
        plugin = StatusImagePlugin(host, config)
        assert plugin.snapshots.bots.resolve_name(host.registry.bots[1]) == "Robert"


class TestThemeSelection:
    def test_default_with_renderer(self) -> None:
        assert StatusImagePlugin(FakeHost([], renderer=MagicMock())).theme == "default"

    def test_card_without_renderer(self) -> None:
        assert StatusImagePlugin(FakeHost([])).theme == "card"

    def test_explicit_theme(self) -> None:
        plugin = StatusImagePlugin(FakeHost([]), PluginConfig(theme="nightdream"))
        assert plugin.theme == "nightdream"


class TestRenderStatus:
    @pytest.mark.asyncio
    async def test_card_theme_returns_png(self) -> None:
        plugin = StatusImagePlugin(FakeHost(_bots()))
        image = await plugin.render_status(Session("discord", "2"))
        assert image.startswith(PNG_MAGIC)

    @pytest.mark.asyncio
    async def test_html_theme_uses_renderer(self) -> None:
        renderer = MagicMock()
        renderer.render = AsyncMock(return_value=b"image")
        config = PluginConfig(background=["file:///only.jpg"])
        plugin = StatusImagePlugin(FakeHost(_bots(), renderer), config)

        assert await plugin.render_status(Session("discord", "2")) == b"image"
        html = renderer.render.await_args.args[0]
        assert "file:///only.jpg" in html
        assert html.index("Bob · Discord") < html.index("Alice · OneBot")

    @pytest.mark.asyncio
    async def test_card_theme_logs_ignored_background(self, caplog) -> None:
        config = PluginConfig(theme="card", background=["file:///bg.jpg"])
        plugin = StatusImagePlugin(FakeHost(_bots()), config)
        with caplog.at_level(logging.DEBUG, logger="status_image.plugin"):
            image = await plugin.render_status(Session("discord", "2"))
        assert image.startswith(PNG_MAGIC)
        assert "background list ignored" in caplog.text

    @pytest.mark.asyncio
    async def test_html_theme_without_renderer(self) -> None:
        plugin = StatusImagePlugin(FakeHost(_bots()), PluginConfig(theme="default"))
        with pytest.raises(RuntimeError, match="HTML rendering service"):
            await plugin.render_status(Session("discord", "2"))

    @pytest.mark.asyncio
    async def test_no_bots(self) -> None:
        plugin = StatusImagePlugin(FakeHost([]))
        with pytest.raises(NoBotAvailableError):
            await plugin.render_status(Session("discord", "2"))

    @pytest.mark.asyncio
    async def test_sandbox_bots_hidden_from_real_platform(self) -> None:
        host = FakeHost([FakeBot("sandbox:x", "9")])
        plugin = StatusImagePlugin(host)
        with pytest.raises(NoBotAvailableError):
            await plugin.render_status(Session("discord", "2"))
        image = await plugin.render_status(Session("sandbox:x", "9"))
        assert image.startswith(PNG_MAGIC)


class TestBackground:
    def test_none_configured(self) -> None:
        assert StatusImagePlugin(FakeHost([])).pick_background() is None

    def test_picks_from_list(self) -> None:
        choices = ["a", "b", "c"]
        plugin = StatusImagePlugin(FakeHost([]), PluginConfig(background=choices))
        assert plugin.pick_background() in choices


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_login_added_sets_running_time(self) -> None:
        plugin = StatusImagePlugin(FakeHost(_bots()))
        plugin.snapshots.bots._clock = lambda: 50_000
        plugin.on_login_added("onebot:1", 20_000)
        info = await plugin.get_system_info("onebot")
        assert info.bots[0].running_time == 30_000

    @pytest.mark.asyncio
    async def test_ready_and_dispose(self) -> None:
        plugin = StatusImagePlugin(FakeHost(_bots()))
        await plugin.on_ready()
        assert plugin.snapshots.messages.cached_date is not None
        await plugin.on_dispose()
