"""Terminal handle owning interactive mode, cursor visibility and key input.

POSIX only: keys are read straight from the input file descriptor after a
termios switch. A trailing ESC gets a short grace period for the rest of an
escape sequence, then is reported as a lone Escape press.
"""

from __future__ import annotations

import codecs
import logging
import os
import select
import sys
import termios
from collections import deque
from types import TracebackType

import readchar
from rich.console import Console
from rich.control import Control

logger = logging.getLogger("picklist.terminal")

READ_CHUNK_SIZE = 64
ESCAPE_TIMEOUT = 0.01

# Arrow keys arrive as CSI (ESC [) or, in application cursor mode, SS3 (ESC O)
ESCAPE_SEQUENCES: dict[str, str] = {
    "\x1b[A": readchar.key.UP,
    "\x1b[B": readchar.key.DOWN,
    "\x1b[C": readchar.key.RIGHT,
    "\x1b[D": readchar.key.LEFT,
    "\x1bOA": readchar.key.UP,
    "\x1bOB": readchar.key.DOWN,
    "\x1bOC": readchar.key.RIGHT,
    "\x1bOD": readchar.key.LEFT,
}


class TerminalError(RuntimeError):
    """Base class for terminal failures."""

    pass


class TerminalSetupError(TerminalError):
    """Raised when interactive mode cannot be enabled or restored."""

    pass


class RenderError(TerminalError):
    """Raised when writing or flushing output fails."""

    pass


class InputError(TerminalError):
    """Raised when polling or reading key input fails."""

    pass


def decode_keys(data: str) -> list[str]:
    """Split raw terminal input into readchar-style key strings.

    Escape sequences are kept whole; known arrow sequences map to
    ``readchar.key`` values. CR and LF both become ``readchar.key.ENTER``; a
    bare ESC is returned as ``readchar.key.ESC``.
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == readchar.key.ESC and i + 1 < len(data) and data[i + 1] in "[O":
            end = i + 2
            # parameter bytes run until a final byte in @..~
            while end < len(data) and not ("@" <= data[end] <= "~"):
                end += 1
            seq = data[i : end + 1]
            keys.append(ESCAPE_SEQUENCES.get(seq, seq))
            i = end + 1
        elif ch in "\r\n":
            keys.append(readchar.key.ENTER)
            i += 1
        else:
            keys.append(ch)
            i += 1
    return keys


def _interactive_attrs(attrs: list) -> list:
    """Copy of termios attrs with echo, line buffering and signals off."""
    new = list(attrs)
    new[6] = list(attrs[6])
    new[0] &= ~(termios.IXON | termios.ICRNL)
    new[3] &= ~(termios.ICANON | termios.ECHO | termios.IEXTEN | termios.ISIG)
    new[6][termios.VMIN] = 1
    new[6][termios.VTIME] = 0
    return new


class Terminal:
    """Exclusive handle on the terminal for one interactive session.

    Use as a context manager so the original mode is restored on every
    exit path::

        with Terminal() as term:
            if term.poll(0.05):
                key = term.read_key()
    """

    def __init__(self, console: Console | None = None, fd: int | None = None):
        if console is None:
            # stdout stays free for piped results; the list is drawn on stderr
            console = Console(stderr=not sys.stdout.isatty(), highlight=False)
        self.console = console
        self._fd = fd
        self._saved_attrs: list | None = None
        self._pending: deque[str] = deque()
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def fd(self) -> int:
        if self._fd is None:
            self._fd = sys.stdin.fileno()
        return self._fd

    @property
    def interactive(self) -> bool:
        return self._saved_attrs is not None

    def __enter__(self) -> Terminal:
        self.enter()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.exit()

    def enter(self) -> None:
        """Switch to interactive mode and hide the text cursor."""
        if self.interactive:
            raise TerminalSetupError("terminal is already in interactive mode")
        try:
            fd = self.fd
            if not os.isatty(fd):
                raise TerminalSetupError("standard input is not a terminal")
            saved = termios.tcgetattr(fd)
            termios.tcsetattr(fd, termios.TCSAFLUSH, _interactive_attrs(saved))
        except (termios.error, OSError, ValueError) as e:
            raise TerminalSetupError(f"cannot enable interactive mode: {e}") from e

        self._saved_attrs = saved
        logger.debug("entered interactive mode on fd %d", fd)
        try:
            self.show_cursor(False)
        except RenderError:
            self.exit()
            raise

    def exit(self) -> None:
        """Show the cursor and restore the saved mode.

        Both steps run even if the first fails; the first failure is raised
        afterwards. No-op when not interactive.
        """
        if not self.interactive:
            return
        saved, self._saved_attrs = self._saved_attrs, None
        self._pending.clear()
        self._decoder.reset()

        failure: TerminalError | None = None
        try:
            self.show_cursor(True)
        except RenderError as e:
            logger.error("failed to show cursor: %s", e)
            failure = e

        try:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, saved)
        except (termios.error, OSError) as e:
            logger.error("failed to restore terminal mode: %s", e)
            if failure is None:
                failure = TerminalSetupError(f"cannot restore terminal mode: {e}")
                failure.__cause__ = e
        else:
            logger.debug("restored terminal mode on fd %d", self.fd)

        if failure is not None:
            raise failure

    def show_cursor(self, show: bool = True) -> None:
        try:
            self.console.show_cursor(show)
            self.console.file.flush()
        except OSError as e:
            action = "show" if show else "hide"
            raise RenderError(f"cannot {action} cursor: {e}") from e

    def clear(self) -> None:
        """Home the cursor and clear the screen below it."""
        try:
            self.console.control(Control.home(), Control.clear())
        except OSError as e:
            raise RenderError(f"cannot clear screen: {e}") from e

    def flush(self) -> None:
        try:
            self.console.file.flush()
        except OSError as e:
            raise RenderError(f"cannot flush output: {e}") from e

    def poll(self, timeout: float) -> bool:
        """Wait up to timeout seconds for a key. True if one is available."""
        if self._pending:
            return True
        return self._input_ready(timeout)

    def read_key(self) -> str:
        """Return the next key, blocking until one arrives."""
        while not self._pending:
            text = self._read_chunk()
            # slow links can split an escape sequence across reads
            while _incomplete_escape(text) and self._input_ready(ESCAPE_TIMEOUT):
                text += self._read_chunk()
            self._pending.extend(decode_keys(text))
        return self._pending.popleft()

    def _input_ready(self, timeout: float) -> bool:
        try:
            ready, _, _ = select.select([self.fd], [], [], timeout)
        except (OSError, ValueError) as e:
            raise InputError(f"cannot poll for input: {e}") from e
        return bool(ready)

    def _read_chunk(self) -> str:
        try:
            data = os.read(self.fd, READ_CHUNK_SIZE)
        except OSError as e:
            raise InputError(f"cannot read input: {e}") from e
        if not data:
            raise InputError("input stream closed")
        return self._decoder.decode(data)


def _incomplete_escape(text: str) -> bool:
    """True if text ends with ESC or an unfinished CSI/SS3 introducer."""
    return text.endswith(readchar.key.ESC) or text[-2:] in ("\x1b[", "\x1bO")
