"""Archive introspection: member listing, binaries, desktop entries, icons."""

from .desktop import detect_desktop_entry, detect_icon, xdg_directories
from .introspector import (
    detect_binaries,
    find_root_directory,
    inspect,
    inspect_archive,
    list_members,
    select_best_binary,
)

__all__ = [
    "detect_binaries",
    "detect_desktop_entry",
    "detect_icon",
    "find_root_directory",
    "inspect",
    "inspect_archive",
    "list_members",
    "select_best_binary",
    "xdg_directories",
]
