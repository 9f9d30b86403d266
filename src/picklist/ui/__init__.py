"""UI module."""

from .formatting import format_item, format_label
from .selectable_menu import SelectableMenu, show_menu
from .terminal import (
    InputError,
    RenderError,
    Terminal,
    TerminalError,
    TerminalSetupError,
    decode_keys,
)

__all__ = [
    "InputError",
    "RenderError",
    "SelectableMenu",
    "Terminal",
    "TerminalError",
    "TerminalSetupError",
    "decode_keys",
    "format_item",
    "format_label",
    "show_menu",
]
