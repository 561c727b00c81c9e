"""Tests for primary-bot selection."""

from __future__ import annotations

import pytest

from status_image.selector import NoBotAvailableError, select_primary

from .conftest import make_bot_info

A = make_bot_info("onebot:x")
B = make_bot_info("discord:y")
C = make_bot_info("discord:z")


class TestSelectPrimary:
    def test_identity_match(self) -> None:
        primary, ordered = select_primary([A, B], requesting_sid="discord:y")
        assert primary is B
        assert ordered == [B, A]

    def test_identity_beats_platform(self) -> None:
        primary, _ = select_primary([A, B, C], "discord:z", "discord")
        assert primary is C

    def test_platform_match(self) -> None:
        primary, ordered = select_primary([B, A], "onebot:missing", "onebot")
        assert primary is A
        assert ordered == [A, B]

    def test_first_platform_match_wins(self) -> None:
        primary, _ = select_primary([A, B, C], None, "discord")
        assert primary is B

    def test_falls_back_to_first(self) -> None:
        primary, ordered = select_primary([A, B, C], "qq:1", "qq")
        assert primary is A
        assert ordered == [A, B, C]

    def test_peers_keep_relative_order(self) -> None:
        _, ordered = select_primary([A, B, C], "discord:z")
        assert ordered == [C, A, B]

    def test_empty_list(self) -> None:
        with pytest.raises(NoBotAvailableError):
            select_primary([], "onebot:x", "onebot")
