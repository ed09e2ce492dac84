"""Tests for the click commands, board commands and Rich rendering helpers."""

from __future__ import annotations

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from voidstream.cli.app import cli
from voidstream.cli.board import BUSY_LABEL, IDLE_LABEL, submit_label
from voidstream.cli.commands import CommandRegistry
from voidstream.cli.rendering import EMPTY_STATE, render_char_count, render_feed, to_ansi
from voidstream.core.config import Settings
from voidstream.feed.models import Urgency
from voidstream.feed.renderer import PostElement

from conftest import make_post


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, settings: Settings, args: list[str]):
    with patch("voidstream.cli.app.get_settings", return_value=settings), \
         patch("voidstream.cli.app.setup_logging"):
        return runner.invoke(cli, args)


# --- click commands ---


def test_post_empty_content_rejected_without_network(runner, settings):
    with patch("voidstream.cli.app._post") as post_mock:
        result = _invoke(runner, settings, ["post", "   "])
    assert result.exit_code == 1
    assert "cannot be empty" in result.output
    post_mock.assert_not_called()


def test_post_too_long_rejected(runner, settings):
    with patch("voidstream.cli.app._post") as post_mock:
        result = _invoke(runner, settings, ["post", "x" * 501])
    assert result.exit_code == 1
    assert "max 500" in result.output
    post_mock.assert_not_called()


def test_post_success(runner, settings):
    with patch("voidstream.cli.app._post", new=AsyncMock(return_value=True)) as post_mock:
        result = _invoke(runner, settings, ["post", "hello", "void"])
    assert result.exit_code == 0
    post_mock.assert_awaited_once_with(settings, "hello void")


def test_post_failure_exits_nonzero(runner, settings):
    with patch("voidstream.cli.app._post", new=AsyncMock(return_value=False)):
        result = _invoke(runner, settings, ["post", "hello"])
    assert result.exit_code == 1


def test_missing_credentials(runner, tmp_path, monkeypatch):
    monkeypatch.delenv("SUPABASE_URL", raising=False)
    monkeypatch.delenv("SUPABASE_ANON_KEY", raising=False)
    bare = Settings(data_dir=tmp_path, _env_file=None)
    result = _invoke(runner, bare, ["list"])
    assert result.exit_code == 1
    assert "SUPABASE_URL" in result.output


def test_check_reports_connection(runner, settings):
    controller = MagicMock()
    controller.gate.check = AsyncMock(return_value=True)
    controller.close = AsyncMock()
    with patch("voidstream.feed.controller.FeedController.from_settings", return_value=controller):
        result = _invoke(runner, settings, ["check"])
    assert result.exit_code == 0
    assert "Connected to https://example.supabase.co" in result.output
    controller.close.assert_awaited_once()


def test_check_failure(runner, settings):
    controller = MagicMock()
    controller.gate.check = AsyncMock(return_value=False)
    controller.close = AsyncMock()
    with patch("voidstream.feed.controller.FeedController.from_settings", return_value=controller):
        result = _invoke(runner, settings, ["check"])
    assert result.exit_code == 1
    assert "connection failed" in result.output


# --- board slash commands ---


def test_command_registry_has_defaults():
    cmds = CommandRegistry().commands
    for name in ("help", "refresh", "pause", "resume", "status", "quit"):
        assert name in cmds


@pytest.mark.asyncio
async def test_dispatch_unknown_command():
    board = MagicMock()
    board.dispatcher.error = AsyncMock()
    await CommandRegistry().dispatch("/unknown", board)
    board.dispatcher.error.assert_awaited_once()
    assert "Unknown command" in board.dispatcher.error.await_args.args[0]


@pytest.mark.asyncio
async def test_refresh_and_pause_commands():
    board = MagicMock()
    board.controller.refresh = AsyncMock()
    board.controller.set_visible = AsyncMock()
    board.dispatcher.info = AsyncMock()
    registry = CommandRegistry()

    await registry.dispatch("/refresh", board)
    await registry.dispatch("/pause", board)
    await registry.dispatch("/resume", board)

    board.controller.refresh.assert_awaited_once()
    assert [c.args[0] for c in board.controller.set_visible.await_args_list] == [False, True]


@pytest.mark.asyncio
async def test_quit_command_exits_board():
    board = MagicMock()
    await CommandRegistry().dispatch("/quit", board)
    board.exit.assert_called_once()


# --- rendering ---


def test_submit_label():
    assert submit_label(True) == BUSY_LABEL == "TRANSMITTING..."
    assert submit_label(False) == IDLE_LABEL


@pytest.mark.parametrize(
    "count, style",
    [(10, "grey50"), (401, "dark_orange"), (501, "bold red")],
)
def test_char_count_styles(count, style):
    text = render_char_count(count, 500)
    assert text.plain == f"{count}/500"
    assert str(text.style) == style


def test_render_feed_empty_state():
    out = to_ansi(render_feed([], empty=True), width=100)
    assert "No transmissions detected" in out
    assert EMPTY_STATE.startswith("//")


def test_render_feed_shows_content_and_countdown():
    element = PostElement(post=make_post(1, "hello void", age=timedelta(seconds=3)), ttl_label="23h 59m 57s")
    expired = PostElement(post=make_post(2, "gone"), ttl_label="EXPIRED", urgency=Urgency.EXPIRED, fading=True)

    out = to_ansi(render_feed([element, expired], empty=False), width=80)

    assert "hello void" in out
    assert "23h 59m 57s" in out
    assert "EXPIRED" in out
    assert out.index("hello void") < out.index("gone")
