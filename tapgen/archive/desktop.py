"""Desktop-entry and icon detection for archive listings."""

from __future__ import annotations

import posixpath
import re
from typing import Dict, List, Optional, Sequence, Tuple

from ..models import DesktopEntry, IconRecord

ICON_EXTENSIONS: Tuple[str, ...] = (".png", ".svg", ".xpm", ".ico")

ICON_DIRECTORIES: Tuple[str, ...] = (
    "icons/",
    "icon/",
    "pixmaps/",
    "share/icons/",
    "share/pixmaps/",
    ".local/share/icons/",
)

NAMED_SIZES = frozenset({"hicolor", "scalable"})
UNKNOWN_SIZE = "unknown"

SIZE_SCORES: Dict[str, int] = {
    "512x512": 1000,
    "256x256": 900,
    "hicolor": 850,
    "scalable": 850,
    "128x128": 800,
    "64x64": 700,
    "48x48": 600,
    "32x32": 500,
    "16x16": 400,
}
DEFAULT_SIZE_SCORE = 300

FORMAT_SCORES: Tuple[Tuple[str, int], ...] = ((".svg", 100), (".png", 90))
DEFAULT_FORMAT_SCORE = 50

_SIZE_SEGMENT = re.compile(r"^\d[^x]*x\d[^x]*$")

XDG_APPLICATIONS = "applications"
XDG_ICONS = "icons"


def is_desktop_entry(path: str) -> bool:
    return path.lower().endswith(".desktop")


def is_icon_candidate(path: str) -> bool:
    lower = path.lower()
    if not lower.endswith(ICON_EXTENSIONS):
        return False
    if any(directory in lower for directory in ICON_DIRECTORIES):
        return True
    return "icon" in lower


def detect_desktop_entry(paths: Sequence[str]) -> Optional[DesktopEntry]:
    """Return the first ``.desktop`` member, or ``None`` when there is none."""
    for path in paths:
        if is_desktop_entry(path):
            return DesktopEntry(path=path, filename=posixpath.basename(path))
    return None


def extract_icon_size(path: str) -> str:
    """Return the size token for an icon path.

    A ``hicolor`` or ``scalable`` segment wins over an ``NxN`` segment, which
    wins over ``unknown``.
    """
    segments = [segment.lower() for segment in path.split("/")]
    for segment in segments:
        if segment in NAMED_SIZES:
            return segment
    for segment in segments:
        if _SIZE_SEGMENT.match(segment):
            return segment
    return UNKNOWN_SIZE


def score_icon(icon: IconRecord) -> int:
    score = SIZE_SCORES.get(icon.size_token, DEFAULT_SIZE_SCORE)
    lower = icon.filename.lower()
    for extension, bonus in FORMAT_SCORES:
        if lower.endswith(extension):
            return score + bonus
    return score + DEFAULT_FORMAT_SCORE


def icon_candidates(paths: Sequence[str]) -> List[IconRecord]:
    return [
        IconRecord(path=path, filename=posixpath.basename(path), size_token=extract_icon_size(path))
        for path in paths
        if is_icon_candidate(path)
    ]


def detect_icon(paths: Sequence[str]) -> Optional[IconRecord]:
    """Return the highest-scoring icon; earlier members win ties."""
    best: Optional[IconRecord] = None
    best_score = -1
    for candidate in icon_candidates(paths):
        score = score_icon(candidate)
        if score > best_score:
            best, best_score = candidate, score
    return best


def xdg_directories(has_desktop_entry: bool, has_icon: bool) -> Tuple[str, ...]:
    directories: List[str] = []
    if has_desktop_entry:
        directories.append(XDG_APPLICATIONS)
    if has_icon:
        directories.append(XDG_ICONS)
    return tuple(directories)


__all__ = [
    "ICON_DIRECTORIES",
    "ICON_EXTENSIONS",
    "SIZE_SCORES",
    "detect_desktop_entry",
    "detect_icon",
    "extract_icon_size",
    "icon_candidates",
    "is_desktop_entry",
    "is_icon_candidate",
    "score_icon",
    "xdg_directories",
]
