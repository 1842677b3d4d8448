"""Tarball decompression, member listing, and binary detection."""

from __future__ import annotations

import io
import lzma
import posixpath
import tarfile
import zlib
from typing import Collection, Iterable, List, Optional, Sequence, Tuple

from ..errors import ArchiveError, UnsupportedArchiveError
from ..logging import get_logger
from ..models import ArchiveMember, ArchiveReport
from .desktop import detect_desktop_entry, detect_icon, extract_icon_size, is_desktop_entry, is_icon_candidate

logger = get_logger("archive")

# (suffix, tarfile mode) in match order.
_DECOMPRESSORS: Tuple[Tuple[str, str], ...] = (
    (".tar.gz", "r:gz"),
    (".tgz", "r:gz"),
    (".tar.xz", "r:xz"),
    (".tar.bz2", "r:bz2"),
    (".tar", "r:"),
)

BIN_DIRECTORIES: Tuple[str, ...] = ("bin/", "usr/bin/", "usr/local/bin/")

DOC_PREFIXES: Tuple[str, ...] = (
    "LICENSE",
    "README",
    "CHANGELOG",
    "COPYING",
    "AUTHORS",
    "NOTICE",
    "PATENTS",
    "VERSION",
    "MANIFEST",
    "TODO",
)

SUPPORT_SEGMENTS: Tuple[str, ...] = (
    "autocomplete/",
    "completions/",
    "bash_completion/",
    "zsh/",
    "fish/",
    "man/",
    "doc/",
    "docs/",
)

TEXT_EXTENSIONS = frozenset(
    {".txt", ".md", ".rst", ".pdf", ".html", ".xml", ".json", ".yaml", ".yml"}
)
CONFIG_EXTENSIONS = frozenset({".conf", ".cfg", ".ini"})
BINARY_EXTENSIONS = frozenset({"", ".bin", ".elf"})
SCRIPT_SUFFIXES: Tuple[str, ...] = (".sh", ".bash")


def decompressor_mode(filename: str) -> str:
    """Return the ``tarfile`` open mode for an archive filename."""
    lower = filename.lower()
    for suffix, mode in _DECOMPRESSORS:
        if lower.endswith(suffix):
            return mode
    raise UnsupportedArchiveError(f"Unsupported archive format: {filename}")


def list_members(data: bytes, filename: str) -> List[str]:
    """List regular-file member paths of an in-memory tarball, in archive order."""
    mode = decompressor_mode(filename)
    try:
        with tarfile.open(fileobj=io.BytesIO(data), mode=mode) as archive:
            return [
                _strip_current_dir(member.name)
                for member in archive.getmembers()
                if member.isfile()
            ]
    except (tarfile.TarError, EOFError, OSError, zlib.error, lzma.LZMAError) as exc:
        raise ArchiveError(f"Failed to read {filename}: {exc}") from exc


def detect_binaries(paths: Sequence[str]) -> List[str]:
    """Return likely executables, most conventional locations first.

    Members under a ``bin/`` directory are preferred. When none exist, any
    extension-less (or ``.bin``/``.elf``) member outside documentation and
    support directories is accepted.
    """
    binaries = [
        path
        for path in paths
        if not _is_excluded(path, TEXT_EXTENSIONS)
        and _in_bin_directory(path)
        and not posixpath.basename(path).endswith(SCRIPT_SUFFIXES)
    ]
    if binaries:
        return binaries

    fallback_excluded = TEXT_EXTENSIONS | CONFIG_EXTENSIONS
    return [
        path
        for path in paths
        if not _is_excluded(path, fallback_excluded) and _extension(path) in BINARY_EXTENSIONS
    ]


def select_best_binary(binaries: Sequence[str], package_name: str) -> Optional[str]:
    """Pick the binary whose name best matches the package name."""
    if not binaries:
        return None
    if len(binaries) == 1:
        return binaries[0]

    wanted = package_name.lower()
    for path in binaries:
        if posixpath.basename(path).lower() == wanted:
            return path
    for path in binaries:
        base = posixpath.basename(path).lower()
        if wanted in base or base in wanted:
            return path
    return binaries[0]


def find_root_directory(paths: Sequence[str]) -> str:
    """Return the single top-level directory shared by every member, if any."""
    if not paths:
        return ""
    parts = paths[0].split("/")
    if len(parts) < 2:
        return ""
    candidate = parts[0] + "/"
    if all(path.startswith(candidate) for path in paths[1:]):
        return candidate
    return ""


def classify_member(path: str, binaries: Optional[Collection[str]] = None) -> ArchiveMember:
    """Classify one member path.

    With ``binaries`` (the archive-wide result of :func:`detect_binaries`)
    the executable flag is membership in that list; without it the path is
    judged on its own, so the extension-less fallback always applies.
    """
    desktop = is_desktop_entry(path)
    icon = not desktop and is_icon_candidate(path)
    if binaries is None:
        binaries = detect_binaries([path])
    executable = not desktop and not icon and path in binaries
    return ArchiveMember(
        path=path,
        is_executable_candidate=executable,
        is_desktop_entry=desktop,
        is_icon=icon,
        icon_size_token=extract_icon_size(path) if icon else None,
    )


def inspect(paths: Sequence[str], package_name: str) -> ArchiveReport:
    """Derive binary, desktop-entry and icon selections from a member listing."""
    binaries = detect_binaries(paths)
    binary_set = frozenset(binaries)
    report = ArchiveReport(
        members=[classify_member(path, binary_set) for path in paths],
        binaries=binaries,
        best_binary=select_best_binary(binaries, package_name),
        desktop_entry=detect_desktop_entry(paths),
        icon=detect_icon(paths),
        root_directory=find_root_directory(paths),
    )
    logger.debug(
        "Inspected %d members: %d binaries, desktop=%s, icon=%s",
        len(paths),
        len(binaries),
        report.desktop_entry.path if report.desktop_entry else None,
        report.icon.path if report.icon else None,
    )
    return report


def inspect_archive(data: bytes, filename: str, package_name: str) -> ArchiveReport:
    return inspect(list_members(data, filename), package_name)


def _strip_current_dir(name: str) -> str:
    # ``tar czf x.tar.gz ./`` prefixes every member with "./".
    while name.startswith("./"):
        name = name[2:]
    return name


def _is_excluded(path: str, extensions: Iterable[str]) -> bool:
    base = posixpath.basename(path)
    if base.upper().startswith(DOC_PREFIXES):
        return True
    lower = path.lower()
    if any(segment in lower for segment in SUPPORT_SEGMENTS):
        return True
    return _extension(path) in extensions


def _in_bin_directory(path: str) -> bool:
    return any(directory in path for directory in BIN_DIRECTORIES)


def _extension(path: str) -> str:
    return posixpath.splitext(posixpath.basename(path))[1].lower()


__all__ = [
    "BIN_DIRECTORIES",
    "classify_member",
    "decompressor_mode",
    "detect_binaries",
    "find_root_directory",
    "inspect",
    "inspect_archive",
    "list_members",
    "select_best_binary",
]
