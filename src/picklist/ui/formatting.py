"""Rich markup for list lines."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.markup import escape

if TYPE_CHECKING:
    from picklist.models import SelectableItem

# Line prefixes
CURSOR_MARKER = "> "
CURSOR_SELECTED_MARKER = "* "
INDENT = "  "
DEFAULT_SELECTED_COLOR = "green"


def format_label(item: SelectableItem, color: str = DEFAULT_SELECTED_COLOR) -> str:
    """Escaped label, colored when the item is selected."""
    label = escape(item.label)
    if item.selected:
        return f"[{color}]{label}[/{color}]"
    return label


def format_item(
    item: SelectableItem, is_cursor: bool, color: str = DEFAULT_SELECTED_COLOR
) -> str:
    """Format one list line as Rich markup.

    Args:
        item: Item to display
        is_cursor: Whether the list cursor is on this item
        color: Rich color for selected labels

    Returns:
        Bold "> "/"* " prefixed line under the cursor, two-space indent otherwise
    """
    if is_cursor:
        marker = CURSOR_SELECTED_MARKER if item.selected else CURSOR_MARKER
        return f"[bold]{marker}{format_label(item, color)}[/bold]"
    return f"{INDENT}{format_label(item, color)}"
