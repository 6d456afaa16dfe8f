"""CLI command handlers."""

from .catalog import cmd_catalog, cmd_show
from .edit import cmd_describe, cmd_note, cmd_rename, cmd_visit
from .lifecycle import cmd_complete, cmd_start, cmd_stop
from .navigate import cmd_navigate
from .trips import cmd_delete, cmd_fork, cmd_new, cmd_trips

__all__ = [
    "cmd_catalog",
    "cmd_complete",
    "cmd_delete",
    "cmd_describe",
    "cmd_fork",
    "cmd_navigate",
    "cmd_new",
    "cmd_note",
    "cmd_rename",
    "cmd_show",
    "cmd_start",
    "cmd_stop",
    "cmd_trips",
    "cmd_visit",
]
