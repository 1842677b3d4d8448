"""Name normalisation for tokens, class names and slugs, plus Ruby quoting."""

from __future__ import annotations

import re

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS = re.compile(r"-+")

LINUX_SUFFIX = "-linux"


def normalize_package_name(name: str) -> str:
    """Return a lowercase, hyphenated package name.

    ``"My_Cool_App"`` becomes ``"my-cool-app"``.
    """
    lowered = name.lower().replace("_", "-").replace(" ", "-")
    lowered = _INVALID_CHARS.sub("", lowered)
    lowered = _REPEATED_HYPHENS.sub("-", lowered)
    return lowered.strip("-")


def ensure_linux_suffix(name: str) -> str:
    if name.endswith(LINUX_SUFFIX):
        return name
    return name + LINUX_SUFFIX


def class_name_for(package_name: str) -> str:
    """Convert a package name to a Ruby class name (``go-task`` -> ``GoTask``)."""
    words = package_name.replace("-", " ").replace("_", " ").replace(".", " ").split()
    return "".join(word[:1].upper() + word[1:] for word in words)


def slugify(app_name: str) -> str:
    return app_name.lower().replace(" ", "-").replace("_", "-")


def ruby_escape(value: str) -> str:
    """Escape ``value`` for use inside a Ruby double-quoted literal."""
    return value.replace("\\", "\\\\").replace('"', '\\"').replace("#{", "\\#{")


def ruby_string(value: str) -> str:
    """Quote ``value`` as a Ruby double-quoted literal without interpolation."""
    return f'"{ruby_escape(value)}"'


__all__ = [
    "LINUX_SUFFIX",
    "class_name_for",
    "ensure_linux_suffix",
    "normalize_package_name",
    "ruby_escape",
    "ruby_string",
    "slugify",
]
