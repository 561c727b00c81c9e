"""Tests for the bot registry adapter."""

from __future__ import annotations

from status_image.models import MessageStats
from status_image.registry import BotRegistryAdapter, first_defined, is_visible

from .conftest import FakeBot, FakeRegistry


def _adapter(bots: list[FakeBot], names: dict[str, str] | None = None) -> BotRegistryAdapter:
    return BotRegistryAdapter(
        FakeRegistry(bots),
        display_names=names,
        clock=lambda: 1_000_000,
        uptime=lambda: 500_000,
    )


class TestNameResolution:
    def test_override_wins(self) -> None:
        bot = FakeBot("onebot", "1", nick="", name="Bob")
        adapter = _adapter([bot], {"onebot:1": "Robert"})
        assert adapter.resolve_name(bot) == "Robert"

    def test_without_override_uses_name(self) -> None:
        bot = FakeBot("onebot", "1", nick="", name="Bob")
        assert _adapter([bot]).resolve_name(bot) == "Bob"

    def test_nick_before_name(self) -> None:
        bot = FakeBot("onebot", "1", nick="Bobby", name="Bob")
        assert _adapter([bot]).resolve_name(bot) == "Bobby"

    def test_all_empty(self) -> None:
        bot = FakeBot("onebot", "1", nick="", name="")
        assert _adapter([bot]).resolve_name(bot) == ""

    def test_override_for_other_bot_ignored(self) -> None:
        bot = FakeBot("onebot", "1", name="Bob")
        assert _adapter([bot], {"onebot:2": "Robert"}).resolve_name(bot) == "Bob"

    def test_first_defined(self) -> None:
        assert first_defined(None, "", "x", "y") == "x"
        assert first_defined() == ""


class TestVisibility:
    def test_sandbox_hidden_from_real_platform(self) -> None:
        assert not is_visible(FakeBot("sandbox:x", "1"), "discord")

    def test_sandbox_shown_to_sandbox(self) -> None:
        assert is_visible(FakeBot("sandbox:x", "1"), "sandbox:x")

    def test_sandbox_shown_without_requesting_platform(self) -> None:
        assert is_visible(FakeBot("sandbox:x", "1"), None)

    def test_hidden_never_shown(self) -> None:
        assert not is_visible(FakeBot("onebot", "1", hidden=True), "onebot")
        assert not is_visible(FakeBot("sandbox:x", "1", hidden=True), "sandbox:x")


class TestRunningTime:
    def test_from_login_timestamp(self) -> None:
        adapter = _adapter([])
        adapter.on_login_added("onebot:1", 400_000)
        assert adapter.running_time("onebot:1") == 600_000

    def test_falls_back_to_process_uptime(self) -> None:
        assert _adapter([]).running_time("onebot:1") == 500_000

    def test_reconnect_overwrites(self) -> None:
        adapter = _adapter([])
        adapter.on_login_added("onebot:1", 100_000)
        adapter.on_login_added("onebot:1", 900_000)
        assert adapter.running_time("onebot:1") == 100_000

    def test_never_negative(self) -> None:
        adapter = _adapter([])
        adapter.on_login_added("onebot:1", 2_000_000)
        assert adapter.running_time("onebot:1") == 0


class TestListBots:
    def test_filters_and_keeps_order(self, registry: FakeRegistry) -> None:
        adapter = BotRegistryAdapter(registry, clock=lambda: 0, uptime=lambda: 0)
        assert [b.sid for b in adapter.list_bots("discord")] == [
            "onebot:1001", "discord:2002",
        ]
        assert [b.sid for b in adapter.list_bots("sandbox:x")] == [
            "onebot:1001", "discord:2002", "sandbox:x:3003",
        ]

    def test_missing_stats_are_zero(self, registry: FakeRegistry) -> None:
        adapter = BotRegistryAdapter(registry, clock=lambda: 0, uptime=lambda: 0)
        bots = adapter.list_bots("discord", {"onebot:1001": MessageStats(send=2, receive=5)})
        assert bots[0].messages == MessageStats(send=2, receive=5)
        assert bots[1].messages == MessageStats(send=0, receive=0)

    def test_decorates_bot(self) -> None:
        bot = FakeBot("onebot", "1", nick="Al", avatar="https://a/b.png", status=3)
        info = _adapter([bot]).list_bots("onebot")[0]
        assert info.name == "Al"
        assert info.avatar == "https://a/b.png"
        assert info.status == 3
        assert info.running_time == 500_000
