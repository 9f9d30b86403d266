"""Selectable list menu: full-repaint render loop with key dispatch."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import readchar
from rich.markup import escape

from picklist.config import Config
from picklist.models import SelectableList

from .formatting import format_item
from .terminal import InputError, RenderError, Terminal

logger = logging.getLogger("picklist.menu")

# Key bindings, checked in this order
QUIT_KEYS = (readchar.key.CTRL_C, "q", readchar.key.ESC)
TOGGLE_KEYS = (readchar.key.ENTER, readchar.key.SPACE)
UP_KEYS = (readchar.key.UP,)
DOWN_KEYS = (readchar.key.DOWN, readchar.key.TAB)


class SelectableMenu:
    """Interactive list where each item can be toggled on and off.

    Example:
        model = SelectableList.from_labels(["Apple", "Banana", "Cherry"])
        SelectableMenu(model, Terminal()).run()
        print(model.selected_labels())

    Keys: Up/Down/Tab move, Enter/Space toggle, q/Esc/Ctrl+C quit.
    """

    def __init__(
        self,
        model: SelectableList,
        terminal: Terminal,
        config: Config | None = None,
    ):
        self.model = model
        self.terminal = terminal
        self.config = config or Config.load()

    def render(self) -> None:
        """Draw the banner and every item, then flush."""
        console = self.terminal.console
        try:
            # Buffer the frame so it is written in one piece
            with console:
                console.print(f"\n\n[bold]{escape(self.config.title)}[/bold]\n", highlight=False)
                for index, item in enumerate(self.model):
                    line = format_item(item, index == self.model.cursor, self.config.selected_color)
                    console.print(line, highlight=False)
        except OSError as e:
            raise RenderError(f"cannot draw list: {e}") from e
        self.terminal.flush()

    def handle_key(self, key: str) -> bool:
        """Apply a key to the model. Returns False when the user asked to quit."""
        if key in QUIT_KEYS:
            logger.debug("quit requested with %r", key)
            return False
        if key in TOGGLE_KEYS:
            self.model.toggle_current()
        elif key in UP_KEYS:
            self.model.move(-1)
        elif key in DOWN_KEYS:
            self.model.move(1)
        return True

    def run(self) -> SelectableList:
        """Run the session until a quit key. Returns the (mutated) model."""
        with self.terminal:
            try:
                self._loop()
            except KeyboardInterrupt:
                logger.debug("session interrupted")
        return self.model

    def _loop(self) -> None:
        redraw = True
        while True:
            if redraw:
                self.terminal.clear()
                self.render()

            try:
                if not self.terminal.poll(self.config.poll_interval):
                    redraw = False
                    continue
                key = self.terminal.read_key()
            except InputError as e:
                logger.warning("input failed, ending session: %s", e)
                raise

            if not self.handle_key(key):
                return
            redraw = True


def show_menu(
    labels: Iterable[str],
    config: Config | None = None,
    terminal: Terminal | None = None,
) -> list[str]:
    """Show a selectable list and return the labels the user selected."""
    model = SelectableList.from_labels(labels)
    menu = SelectableMenu(model, terminal or Terminal(), config)
    return menu.run().selected_labels()
