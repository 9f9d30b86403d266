"""Tests for the selectable menu loop, driven by a scripted terminal."""

import io
import os
import termios
import threading
import time

import pytest
import readchar
from rich.console import Console

from picklist.config import Config
from picklist.models import SelectableList
from picklist.ui.selectable_menu import SelectableMenu, show_menu
from picklist.ui.terminal import InputError, RenderError, Terminal

LABELS = ["Item 1", "Item 2", "Item 3", "Item 4"]


class ScriptedTerminal:
    """Stands in for Terminal: replays keys, None meaning an idle poll."""

    def __init__(self, keys):
        self.console = Console(
            file=io.StringIO(), width=80, force_terminal=False, color_system=None, highlight=False
        )
        self.keys = list(keys)
        self.enter_count = 0
        self.exit_count = 0
        self.clear_count = 0
        self.polls: list[float] = []
        self.fail_poll: Exception | None = None
        self.fail_flush: Exception | None = None

    def __enter__(self):
        self.enter_count += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exit_count += 1

    @property
    def output(self) -> str:
        return self.console.file.getvalue()

    def clear(self):
        self.clear_count += 1

    def flush(self):
        if self.fail_flush:
            raise self.fail_flush

    def poll(self, timeout):
        self.polls.append(timeout)
        if self.fail_poll:
            raise self.fail_poll
        if not self.keys:
            raise AssertionError("script ran out of keys")
        if self.keys[0] is None:
            self.keys.pop(0)
            return False
        return True

    def read_key(self):
        key = self.keys.pop(0)
        if isinstance(key, BaseException):
            raise key
        return key


def run_script(keys, labels=LABELS, config=None):
    model = SelectableList.from_labels(labels)
    term = ScriptedTerminal(keys)
    SelectableMenu(model, term, config).run()
    return model, term


class TestHandleKey:
    def setup_method(self):
        self.model = SelectableList.from_labels(LABELS)
        self.menu = SelectableMenu(self.model, ScriptedTerminal([]))

    @pytest.mark.parametrize("key", [readchar.key.CTRL_C, "q", readchar.key.ESC])
    def test_quit_keys(self, key):
        assert self.menu.handle_key(key) is False

    @pytest.mark.parametrize("key", [readchar.key.ENTER, readchar.key.SPACE])
    def test_toggle_keys(self, key):
        assert self.menu.handle_key(key) is True
        assert self.model.current.selected

    def test_up_wraps(self):
        self.menu.handle_key(readchar.key.UP)
        assert self.model.cursor == 3

    @pytest.mark.parametrize("key", [readchar.key.DOWN, readchar.key.TAB])
    def test_forward_keys(self, key):
        self.menu.handle_key(key)
        assert self.model.cursor == 1

    @pytest.mark.parametrize("key", ["x", "Q", readchar.key.LEFT, "\x1b[1;5A"])
    def test_other_keys_ignored(self, key):
        assert self.menu.handle_key(key) is True
        assert self.model.cursor == 0
        assert not any(item.selected for item in self.model)


class TestRun:
    def test_full_session(self):
        """Down, Space, Up, Enter, Tab, q leaves the first two items selected."""
        keys = [
            readchar.key.DOWN,
            readchar.key.SPACE,
            readchar.key.UP,
            readchar.key.ENTER,
            readchar.key.TAB,
            "q",
        ]
        model, term = run_script(keys)
        assert model.cursor == 1
        assert [item.selected for item in model] == [True, True, False, False]
        assert term.enter_count == 1
        assert term.exit_count == 1

    def test_ctrl_c_ends_session(self):
        model, term = run_script([readchar.key.SPACE, readchar.key.CTRL_C, readchar.key.DOWN])
        assert model.selected_labels() == ["Item 1"]
        assert term.keys == [readchar.key.DOWN]
        assert term.exit_count == 1

    def test_escape_ends_session(self):
        _, term = run_script([readchar.key.ESC])
        assert term.exit_count == 1

    def test_keyboard_interrupt_ends_session(self):
        model, term = run_script([readchar.key.DOWN, KeyboardInterrupt()])
        assert model.cursor == 1
        assert term.exit_count == 1

    def test_idle_polls_skip_repaint(self):
        _, term = run_script([None, None, readchar.key.DOWN, None, "q"])
        # first frame plus one after DOWN
        assert term.clear_count == 2
        assert term.output.count("Welcome to the Selectable List Example!") == 2

    def test_poll_interval_from_config(self):
        _, term = run_script(["q"], config=Config.load(poll_interval_ms=200))
        assert term.polls == [pytest.approx(0.2)]

    def test_default_poll_interval(self):
        _, term = run_script(["q"])
        assert term.polls == [pytest.approx(0.05)]

    def test_input_error_propagates_after_teardown(self):
        model = SelectableList.from_labels(LABELS)
        term = ScriptedTerminal([])
        term.fail_poll = InputError("cannot poll for input: boom")
        with pytest.raises(InputError):
            SelectableMenu(model, term).run()
        assert term.exit_count == 1

    def test_render_error_propagates_after_teardown(self):
        model = SelectableList.from_labels(LABELS)
        term = ScriptedTerminal(["q"])
        term.fail_flush = RenderError("cannot flush output: gone")
        with pytest.raises(RenderError):
            SelectableMenu(model, term).run()
        assert term.exit_count == 1


class TestRender:
    def test_initial_frame(self):
        term = ScriptedTerminal([])
        SelectableMenu(SelectableList.from_labels(LABELS), term).render()
        lines = term.output.splitlines()
        assert lines == [
            "",
            "",
            "Welcome to the Selectable List Example!",
            "",
            "> Item 1",
            "  Item 2",
            "  Item 3",
            "  Item 4",
        ]

    def test_selected_and_cursor_markers(self):
        model = SelectableList.from_labels(LABELS)
        model.toggle_current()
        model.move(2)
        model.toggle_current()
        model.move(-1)
        term = ScriptedTerminal([])
        SelectableMenu(model, term).render()
        assert term.output.splitlines()[4:] == ["  Item 1", "> Item 2", "  Item 3", "  Item 4"]

        model.move(-1)
        term = ScriptedTerminal([])
        SelectableMenu(model, term).render()
        assert term.output.splitlines()[4] == "* Item 1"

    def test_custom_title(self):
        term = ScriptedTerminal([])
        config = Config.load(title="Pick [fruit]")
        SelectableMenu(SelectableList.from_labels(["a"]), term, config).render()
        assert "Pick [fruit]" in term.output

    def test_styles_reach_terminal(self):
        term = ScriptedTerminal([])
        term.console = Console(
            file=io.StringIO(), width=80, force_terminal=True, color_system="standard"
        )
        model = SelectableList.from_labels(LABELS)
        model.toggle_current()
        SelectableMenu(model, term).render()
        out = term.output
        assert "\x1b[1m" in out or "\x1b[1;" in out  # bold
        assert "32m" in out  # green


def test_show_menu_returns_selected_labels():
    term = ScriptedTerminal([readchar.key.TAB, readchar.key.TAB, readchar.key.SPACE, "q"])
    assert show_menu(["a", "b", "c"], terminal=term) == ["c"]


def wait_until_interactive(fd, timeout=5.0):
    """Block until line buffering is off on fd, so typed keys reach the loop."""
    deadline = time.monotonic() + timeout
    while termios.tcgetattr(fd)[3] & termios.ICANON:
        if time.monotonic() > deadline:
            raise AssertionError("session never entered interactive mode")
        time.sleep(0.005)


def test_ctrl_c_on_real_terminal_restores_cooked_mode():
    master, slave = os.openpty()
    try:
        before = termios.tcgetattr(slave)
        model = SelectableList.from_labels(LABELS)
        console = Console(file=io.StringIO(), force_terminal=True, width=80)
        menu = SelectableMenu(model, Terminal(console=console, fd=slave))

        session = threading.Thread(target=menu.run)
        session.start()
        wait_until_interactive(slave)
        os.write(master, b"\x1b[B \x03")
        session.join(timeout=5)

        assert not session.is_alive()
        assert model.selected_labels() == ["Item 2"]
        assert termios.tcgetattr(slave) == before
        assert console.file.getvalue().endswith("\x1b[?25h")
    finally:
        os.close(master)
        os.close(slave)
