"""Interactive full-screen board: live feed above, compose box below."""

from __future__ import annotations

import logging
from collections.abc import Coroutine
from typing import Any

from prompt_toolkit.application import Application
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.history import FileHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.layout import HSplit, Layout, Window
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension
from prompt_toolkit.widgets import TextArea
from rich.console import Group
from rich.text import Text

from voidstream.cli.commands import CommandRegistry
from voidstream.cli.rendering import render_char_count, render_feed, render_notices, to_ansi
from voidstream.core.config import Settings
from voidstream.core.notifications import NotificationDispatcher, NoticeTray
from voidstream.feed.controller import FeedController, SubmissionResult

logger = logging.getLogger(__name__)

BUSY_LABEL = "TRANSMITTING..."
IDLE_LABEL = "COMMIT [Enter]"


def submit_label(submitting: bool) -> str:
    return BUSY_LABEL if submitting else IDLE_LABEL


class Board:
    """prompt_toolkit application around a FeedController."""

    def __init__(
        self,
        settings: Settings,
        controller: FeedController | None = None,
        dispatcher: NotificationDispatcher | None = None,
    ) -> None:
        self._settings = settings
        self.dispatcher = dispatcher or NotificationDispatcher()
        self.tray = NoticeTray(settings.notice_lifetime_seconds)
        self.dispatcher.register(self.tray)
        self.controller = controller or FeedController.from_settings(settings, self.dispatcher)
        self.commands = CommandRegistry()

        settings.history_path.parent.mkdir(parents=True, exist_ok=True)
        self._input = TextArea(
            prompt="> ",
            multiline=True,
            wrap_lines=True,
            height=Dimension(min=1, max=4),
            history=FileHistory(str(settings.history_path)),
        )

        self._app: Application = Application(
            layout=Layout(
                HSplit([
                    Window(FormattedTextControl(self._feed_text), wrap_lines=False),
                    Window(height=1, char="─"),
                    self._input,
                    Window(FormattedTextControl(self._status_text), height=1),
                ]),
                focused_element=self._input,
            ),
            key_bindings=self._key_bindings(),
            full_screen=True,
            refresh_interval=0.5,
        )

        self.controller.set_on_state_change(self._invalidate)
        self.controller.renderer.set_on_update(self._invalidate)

    # ------------------------------------------------------------------
    # Layout content
    # ------------------------------------------------------------------

    def _width(self) -> int:
        return self._app.output.get_size().columns

    def _feed_text(self) -> ANSI:
        renderer = self.controller.renderer
        body = Group(
            render_notices(self.tray.active()),
            render_feed(renderer.elements, renderer.is_empty, self.controller.state.loading),
        )
        return ANSI(to_ansi(body, self._width()))

    def _status_text(self) -> ANSI:
        state = self.controller.state
        line = Text.assemble(
            (f" {submit_label(state.submitting)} ", "bold black on green"),
            "  ",
            render_char_count(len(self._input.text), self.controller.max_length),
            "  ",
            (f"db:{state.connection.value}", "grey50"),
            "  ",
            ("Esc+Enter newline · /help · Ctrl+Q quit", "grey35"),
        )
        return ANSI(to_ansi(line, self._width()).rstrip("\n"))

    def _invalidate(self) -> None:
        if self._app.is_running:
            self._app.invalidate()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add("enter")
        def _submit(event) -> None:
            if self.controller.state.submitting:
                return
            self._spawn(self._submit())

        @kb.add("escape", "enter")
        def _newline(event) -> None:
            event.current_buffer.insert_text("\n")

        @kb.add("c-r")
        def _refresh(event) -> None:
            self._spawn(self.controller.refresh())

        @kb.add("f2")
        def _toggle(event) -> None:
            self._spawn(self.controller.set_visible(not self.controller.state.visible))

        @kb.add("c-c")
        @kb.add("c-q")
        def _quit(event) -> None:
            self.exit()

        return kb

    async def _submit(self) -> None:
        text = self._input.text
        if text.strip().startswith("/"):
            self._input.text = ""
            await self.commands.dispatch(text, self)
            return

        result = await self.controller.submit(text)
        if result is SubmissionResult.SENT:
            self._input.buffer.append_to_history()
            self._input.text = ""
        self._invalidate()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> None:
        self._app.create_background_task(coro)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def exit(self) -> None:
        if self._app.is_running:
            self._app.exit()

    async def run(self) -> None:
        try:
            await self._app.run_async(pre_run=lambda: self._spawn(self.controller.start()))
        finally:
            await self.controller.close()
            logger.info("Board closed")
