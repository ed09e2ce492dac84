"""Click CLI group with board, post, list, and check commands."""

from __future__ import annotations

import asyncio

import click

from voidstream.core.config import Settings, get_settings
from voidstream.core.logging import setup_logging
from voidstream.core.notifications import Notice, NoticeLevel, NotificationDispatcher

_NOTICE_COLORS = {
    NoticeLevel.INFO: "green",
    NoticeLevel.SUCCESS: "bright_green",
    NoticeLevel.ERROR: "red",
}


def _require_credentials(settings: Settings) -> None:
    if not settings.is_configured:
        click.echo(
            "Error: SUPABASE_URL and SUPABASE_ANON_KEY must be set. "
            "Copy .env.example to .env and configure it.",
            err=True,
        )
        raise SystemExit(1)


def _console_dispatcher() -> NotificationDispatcher:
    dispatcher = NotificationDispatcher()

    async def console_sink(notice: Notice) -> None:
        click.secho(notice.message, fg=_NOTICE_COLORS[notice.level], err=notice.level is NoticeLevel.ERROR)

    dispatcher.register(console_sink)
    return dispatcher


@click.group(invoke_without_command=True)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """VoidStream: an ephemeral message board. Posts vanish after 24 hours."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(board)


@cli.command()
def board() -> None:
    """Open the live board."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.app_log_path, console=False)
    _require_credentials(settings)

    from voidstream.cli.board import Board

    asyncio.run(Board(settings).run())


@cli.command()
@click.argument("content", nargs=-1, required=True)
def post(content: tuple[str, ...]) -> None:
    """Send a single transmission."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.app_log_path)

    from voidstream.feed.errors import ValidationError
    from voidstream.feed.models import validate_content

    text = " ".join(content)
    try:
        validate_content(text, settings.max_post_length)
    except ValidationError as e:
        click.secho(str(e), fg="red", err=True)
        raise SystemExit(1)

    _require_credentials(settings)
    ok = asyncio.run(_post(settings, text))
    if not ok:
        raise SystemExit(1)


async def _post(settings: Settings, text: str) -> bool:
    from voidstream.feed.controller import FeedController, SubmissionResult

    controller = FeedController.from_settings(
        settings, _console_dispatcher(), live=False, refetch_after_submit=False
    )
    try:
        if not await controller.gate.check():
            click.secho("Failed to connect to database. Please check configuration.", fg="red", err=True)
            return False
        result = await controller.submit(text)
    finally:
        await controller.close()
    return result is SubmissionResult.SENT


@cli.command("list")
def list_posts() -> None:
    """Print the current feed once, newest first."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.app_log_path)
    _require_credentials(settings)
    if not asyncio.run(_list(settings)):
        raise SystemExit(1)


async def _list(settings: Settings) -> bool:
    from voidstream.cli.rendering import console, render_feed
    from voidstream.feed.controller import FeedController

    controller = FeedController.from_settings(settings, _console_dispatcher(), live=False)
    try:
        if not await controller.gate.check():
            click.secho("Failed to connect to database. Please check configuration.", fg="red", err=True)
            return False
        drawn = await controller.refresh()
        renderer = controller.renderer
        if drawn:
            console.print(render_feed(renderer.elements, renderer.is_empty))
        return drawn
    finally:
        await controller.close()


@cli.command()
def check() -> None:
    """Verify the backend is reachable."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.app_log_path)
    _require_credentials(settings)

    async def _check() -> bool:
        from voidstream.feed.controller import FeedController

        controller = FeedController.from_settings(settings, _console_dispatcher(), live=False)
        try:
            return await controller.gate.check()
        finally:
            await controller.close()

    if asyncio.run(_check()):
        click.secho(f"Connected to {settings.supabase_url}", fg="green")
    else:
        click.secho("Database connection failed.", fg="red", err=True)
        raise SystemExit(1)
