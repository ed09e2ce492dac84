"""Feed, notice and counter rendering helpers using Rich."""

from __future__ import annotations

from rich.console import Console, Group, RenderableType
from rich.panel import Panel
from rich.text import Text

from voidstream.core.notifications import Notice, NoticeLevel
from voidstream.feed.models import Urgency
from voidstream.feed.renderer import PostElement

console = Console()

URGENCY_STYLES = {
    Urgency.HEALTHY: "bold green",
    Urgency.WARNING: "bold dark_orange",
    Urgency.CRITICAL: "bold red",
    Urgency.EXPIRED: "bold red",
}

NOTICE_STYLES = {
    NoticeLevel.INFO: "black on green",
    NoticeLevel.SUCCESS: "black on bright_green",
    NoticeLevel.ERROR: "white on red",
}

EMPTY_STATE = "// No transmissions detected. The void awaits your thoughts..."


def render_post(element: PostElement) -> Panel:
    """Render one post with its time-to-live footer."""
    footer = Text("// time-to-live: ", style="dim")
    footer.append(element.ttl_label, style=URGENCY_STYLES[element.urgency])
    return Panel(
        Text(element.post.content),
        subtitle=footer,
        subtitle_align="left",
        border_style="grey37" if element.fading else "green",
        style="dim" if element.fading else "",
        expand=True,
    )


def render_feed(elements: list[PostElement], empty: bool, loading: bool = False) -> RenderableType:
    if elements:
        return Group(*(render_post(e) for e in elements))
    if empty:
        return Text(EMPTY_STATE, style="grey50", justify="center")
    if loading:
        return Text("Loading transmissions...", style="grey50", justify="center")
    return Text("")


def render_notices(notices: list[Notice]) -> RenderableType:
    lines = [
        Text(f" {n.message} ", style=NOTICE_STYLES[n.level], justify="center")
        for n in notices
    ]
    return Group(*lines)


def render_char_count(count: int, max_length: int) -> Text:
    """Character counter: grey, orange past 80%, red past the limit."""
    if count > max_length:
        style = "bold red"
    elif count > max_length * 0.8:
        style = "dark_orange"
    else:
        style = "grey50"
    return Text(f"{count}/{max_length}", style=style)


def to_ansi(renderable: RenderableType, width: int) -> str:
    """Render to an ANSI string for prompt_toolkit windows."""
    capture_console = Console(
        width=max(width, 20),
        force_terminal=True,
        color_system="truecolor",
        legacy_windows=False,
    )
    with capture_console.capture() as capture:
        capture_console.print(renderable)
    return capture.get()
