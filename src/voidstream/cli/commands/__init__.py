"""Command registry and dispatch for board slash commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from voidstream.cli.board import Board

CommandHandler = Callable[["Board", list[str]], Awaitable[None]]


class CommandRegistry:
    """Registry for slash commands typed into the board input."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandHandler] = {}
        self._descriptions: dict[str, str] = {}
        self._register_defaults()

    def register(
        self, name: str, handler: CommandHandler, description: str = ""
    ) -> None:
        self._commands[name] = handler
        self._descriptions[name] = description

    def _register_defaults(self) -> None:
        from voidstream.cli.commands.feed_cmds import (
            handle_help,
            handle_pause,
            handle_quit,
            handle_refresh,
            handle_resume,
            handle_status,
        )

        self.register("help", handle_help, "Show available commands")
        self.register("refresh", handle_refresh, "Reload the feed now")
        self.register("pause", handle_pause, "Hide the feed and stop countdowns")
        self.register("resume", handle_resume, "Show the feed again with fresh data")
        self.register("status", handle_status, "Show connection status")
        self.register("quit", handle_quit, "Leave the board")

    async def dispatch(self, raw_input: str, board: Board) -> None:
        parts = raw_input.strip().split(maxsplit=1)
        cmd_name = parts[0].lstrip("/").lower()
        args = parts[1].split() if len(parts) > 1 else []

        handler = self._commands.get(cmd_name)
        if handler:
            await handler(board, args)
        else:
            await board.dispatcher.error(
                f"Unknown command: /{cmd_name}. Type /help for available commands."
            )

    @property
    def commands(self) -> dict[str, str]:
        return dict(self._descriptions)
