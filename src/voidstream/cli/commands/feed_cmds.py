"""Board slash command handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from voidstream.cli.board import Board


async def handle_help(board: Board, args: list[str]) -> None:
    names = ", ".join(f"/{name}" for name in board.commands.commands)
    await board.dispatcher.info(f"Commands: {names}")


async def handle_refresh(board: Board, args: list[str]) -> None:
    await board.controller.refresh()


async def handle_pause(board: Board, args: list[str]) -> None:
    await board.controller.set_visible(False)
    await board.dispatcher.info("Feed paused. /resume to reload.")


async def handle_resume(board: Board, args: list[str]) -> None:
    await board.controller.set_visible(True)


async def handle_status(board: Board, args: list[str]) -> None:
    state = board.controller.state
    live = "live" if state.live else "polling fallback"
    posts = len(board.controller.renderer.elements)
    await board.dispatcher.info(
        f"Connection: {state.connection.value} | updates: {live} | posts: {posts}"
    )


async def handle_quit(board: Board, args: list[str]) -> None:
    board.exit()
