"""Data models for picklist."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass


class EmptyListError(ValueError):
    """Raised when a selectable list is built without any items."""

    pass


@dataclass
class SelectableItem:
    """A label with an on/off selection flag."""

    label: str
    selected: bool = False

    def toggle(self) -> None:
        self.selected = not self.selected


class SelectableList:
    """Fixed-size list of items with a wrapping cursor.

    The cursor always points at an existing item: ``0 <= cursor < len(items)``.
    """

    def __init__(self, items: Iterable[SelectableItem], cursor: int = 0):
        self._items = list(items)
        if not self._items:
            raise EmptyListError("a selectable list needs at least one item")
        if not 0 <= cursor < len(self._items):
            raise ValueError(f"cursor {cursor} out of range for {len(self._items)} items")
        self._cursor = cursor

    @classmethod
    def from_labels(cls, labels: Iterable[str]) -> SelectableList:
        """Build a list with one unselected item per label, cursor on the first."""
        return cls(SelectableItem(label) for label in labels)

    @property
    def items(self) -> tuple[SelectableItem, ...]:
        """Read-only view; the list length is fixed for its lifetime."""
        return tuple(self._items)

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current(self) -> SelectableItem:
        return self._items[self._cursor]

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[SelectableItem]:
        return iter(self._items)

    def toggle_current(self) -> None:
        """Flip the selection flag of the highlighted item only."""
        self.current.toggle()

    def move(self, offset: int) -> None:
        """Move the cursor by offset, wrapping around both ends."""
        # Python's % is non-negative for a positive divisor
        self._cursor = (self._cursor + offset) % len(self._items)

    def selected_labels(self) -> list[str]:
        """Labels of selected items, in list order."""
        return [item.label for item in self._items if item.selected]
