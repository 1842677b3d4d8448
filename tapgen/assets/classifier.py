"""Platform and format classification for release asset filenames."""

from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple, TypeVar

from ..models import (
    Architecture,
    ClassifiedAsset,
    OSFamily,
    PackageFormat,
    ReleaseAsset,
)

_T = TypeVar("_T")

# Compound suffixes precede the simple ones they end with.
FORMAT_SUFFIXES: Tuple[Tuple[str, PackageFormat], ...] = (
    (".tar.gz", PackageFormat.TARBALL_GZ),
    (".tgz", PackageFormat.TARBALL_GZ),
    (".tar.xz", PackageFormat.TARBALL_XZ),
    (".tar.bz2", PackageFormat.TARBALL_BZ2),
    (".tar", PackageFormat.TARBALL_PLAIN),
    (".deb", PackageFormat.DEBIAN_PACKAGE),
    (".rpm", PackageFormat.RPM_PACKAGE),
    (".appimage", PackageFormat.APPIMAGE),
)

TARGET_OS_MARKERS: Tuple[Tuple[str, OSFamily], ...] = tuple(
    (marker, OSFamily.TARGET)
    for marker in (
        "linux",
        "ubuntu",
        "debian",
        "fedora",
        "rhel",
        "centos",
        "alpine",
        "archlinux",
        "opensuse",
    )
)

EXCLUDED_OS_MARKERS: Tuple[Tuple[str, OSFamily], ...] = tuple(
    (marker, OSFamily.OTHER)
    for marker in (
        "macos",
        "darwin",
        "osx",
        "apple",
        "windows",
        "win32",
        "win64",
        "freebsd",
        "netbsd",
        "openbsd",
        "android",
        "solaris",
        "illumos",
    )
)

# Short aliases that are also common substrings ("emacs", "darwin") only
# count as whole tokens between "-", "_" or "." separators.
EXCLUDED_OS_TOKENS: Tuple[Tuple[str, OSFamily], ...] = (
    ("mac", OSFamily.OTHER),
    ("win", OSFamily.OTHER),
)

# 64-bit markers first so "arm64" is never read as plain "arm".
ARCHITECTURE_MARKERS: Tuple[Tuple[str, Architecture], ...] = (
    ("x86_64", Architecture.X86_64),
    ("x86-64", Architecture.X86_64),
    ("amd64", Architecture.X86_64),
    ("x64", Architecture.X86_64),
    ("arm64", Architecture.ARM64),
    ("aarch64", Architecture.ARM64),
    ("armv8", Architecture.ARM64),
    ("armv7", Architecture.ARM),
    ("armv6", Architecture.ARM),
    ("armhf", Architecture.ARM),
    ("armel", Architecture.ARM),
    ("arm", Architecture.ARM),
)

SOURCE_MARKERS: Tuple[str, ...] = ("source", "src", "sources")

CHECKSUM_MARKERS: Tuple[str, ...] = (
    "checksum",
    "sha256",
    "sha512",
    "md5",
    "sums.txt",
    "checksums.txt",
)

PRIORITY_TARBALL = 1
PRIORITY_DEBIAN = 2
PRIORITY_OTHER = 3

_OS_SPECIFIC_FORMATS = frozenset({PackageFormat.DEBIAN_PACKAGE, PackageFormat.RPM_PACKAGE})


def classify(asset: ReleaseAsset) -> ClassifiedAsset:
    """Annotate a release asset with OS, architecture, format and priority."""
    lower = asset.name.lower()
    package_format = detect_format(lower)
    return ClassifiedAsset(
        asset=asset,
        os_family=detect_os_family(lower, package_format),
        architecture=detect_architecture(lower),
        package_format=package_format,
        priority_class=priority_for(package_format),
        is_source_archive=_contains_any(lower, SOURCE_MARKERS),
        is_checksum_file=_contains_any(lower, CHECKSUM_MARKERS),
    )


def classify_name(filename: str) -> ClassifiedAsset:
    return classify(ReleaseAsset(name=filename))


def detect_format(filename: str) -> PackageFormat:
    lower = filename.lower()
    for suffix, package_format in FORMAT_SUFFIXES:
        if lower.endswith(suffix):
            return package_format
    return PackageFormat.UNKNOWN


def detect_os_family(filename: str, package_format: PackageFormat | None = None) -> OSFamily:
    """Return the OS family for a filename.

    Debian and RPM packages are target-OS by construction. Otherwise target
    markers win over excluded markers, and a name with neither is unknown.
    """
    lower = filename.lower()
    if package_format is None:
        package_format = detect_format(lower)
    if package_format in _OS_SPECIFIC_FORMATS:
        return OSFamily.TARGET
    family = _first_match(lower, TARGET_OS_MARKERS)
    if family is None:
        family = _first_match(lower, EXCLUDED_OS_MARKERS)
    if family is None:
        family = _first_token_match(lower, EXCLUDED_OS_TOKENS)
    return family or OSFamily.UNKNOWN


def detect_architecture(filename: str) -> Architecture:
    return _first_match(filename.lower(), ARCHITECTURE_MARKERS) or Architecture.UNKNOWN


def priority_for(package_format: PackageFormat) -> int:
    if package_format.is_tarball:
        return PRIORITY_TARBALL
    if package_format is PackageFormat.DEBIAN_PACKAGE:
        return PRIORITY_DEBIAN
    return PRIORITY_OTHER


def _first_match(text: str, table: Sequence[Tuple[str, _T]]) -> Optional[_T]:
    for marker, result in table:
        if marker in text:
            return result
    return None


def _first_token_match(text: str, table: Sequence[Tuple[str, _T]]) -> Optional[_T]:
    tokens = set(re.split(r"[-_.]", text))
    for marker, result in table:
        if marker in tokens:
            return result
    return None


def _contains_any(text: str, markers: Sequence[str]) -> bool:
    return any(marker in text for marker in markers)


__all__ = [
    "ARCHITECTURE_MARKERS",
    "CHECKSUM_MARKERS",
    "EXCLUDED_OS_MARKERS",
    "EXCLUDED_OS_TOKENS",
    "FORMAT_SUFFIXES",
    "PRIORITY_DEBIAN",
    "PRIORITY_OTHER",
    "PRIORITY_TARBALL",
    "SOURCE_MARKERS",
    "TARGET_OS_MARKERS",
    "classify",
    "classify_name",
    "detect_architecture",
    "detect_format",
    "detect_os_family",
    "priority_for",
]
