"""picklist - pick items from a list in the terminal."""

import logging

from picklist.models import EmptyListError, SelectableItem, SelectableList

__version__ = "0.1.0"

# Raw-mode sessions must not get stray log lines; the CLI opts in with --log-file
logging.getLogger("picklist").addHandler(logging.NullHandler())

__all__ = ["EmptyListError", "SelectableItem", "SelectableList", "__version__"]
