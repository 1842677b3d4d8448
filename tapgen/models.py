"""Core data models shared across tapgen components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class OSFamily(str, Enum):
    """Operating-system family inferred from an asset filename."""

    TARGET = "linux"
    OTHER = "other"
    UNKNOWN = "unknown"


class Architecture(str, Enum):
    """CPU architecture inferred from an asset filename."""

    X86_64 = "x86_64"
    ARM64 = "arm64"
    ARM = "arm"
    UNKNOWN = "unknown"


class PackageFormat(str, Enum):
    """Container format of a release asset."""

    TARBALL_GZ = "tar.gz"
    TARBALL_XZ = "tar.xz"
    TARBALL_BZ2 = "tar.bz2"
    TARBALL_PLAIN = "tar"
    DEBIAN_PACKAGE = "deb"
    RPM_PACKAGE = "rpm"
    APPIMAGE = "appimage"
    UNKNOWN = "unknown"

    @property
    def is_tarball(self) -> bool:
        return self in _TARBALL_FORMATS


_TARBALL_FORMATS = frozenset(
    {
        PackageFormat.TARBALL_GZ,
        PackageFormat.TARBALL_XZ,
        PackageFormat.TARBALL_BZ2,
        PackageFormat.TARBALL_PLAIN,
    }
)


@dataclass(frozen=True)
class ReleaseAsset:
    """A downloadable file attached to a published release."""

    name: str
    download_url: str = ""
    size_bytes: int = 0


@dataclass(frozen=True)
class ClassifiedAsset:
    """Release asset annotated with platform and format heuristics."""

    asset: ReleaseAsset
    os_family: OSFamily
    architecture: Architecture
    package_format: PackageFormat
    priority_class: int
    is_source_archive: bool
    is_checksum_file: bool

    @property
    def name(self) -> str:
        return self.asset.name

    @property
    def download_url(self) -> str:
        return self.asset.download_url

    @property
    def size_bytes(self) -> int:
        return self.asset.size_bytes


@dataclass(frozen=True)
class Repository:
    """Repository metadata from the release provider."""

    owner: str
    name: str
    description: str = ""
    homepage: str = ""
    license: str = ""

    @property
    def url(self) -> str:
        return f"https://github.com/{self.owner}/{self.name}"


@dataclass(frozen=True)
class Release:
    """A published release and its assets."""

    tag_name: str
    name: str = ""
    prerelease: bool = False
    draft: bool = False
    published_at: str = ""
    assets: Tuple[ReleaseAsset, ...] = ()

    @property
    def version(self) -> str:
        """Tag name without a leading ``v``."""
        tag = self.tag_name
        if tag[:1] in {"v", "V"} and tag[1:2].isdigit():
            return tag[1:]
        return tag


@dataclass(frozen=True)
class ArchiveMember:
    """A single archive path classified by its name alone."""

    path: str
    is_executable_candidate: bool = False
    is_desktop_entry: bool = False
    is_icon: bool = False
    icon_size_token: Optional[str] = None


@dataclass(frozen=True)
class DesktopEntry:
    """Detected ``.desktop`` launcher inside an archive."""

    path: str
    filename: str


@dataclass(frozen=True)
class IconRecord:
    """Detected application icon inside an archive."""

    path: str
    filename: str
    size_token: str


@dataclass(frozen=True)
class DesktopIntegration:
    """Desktop-integration fields for a cask manifest."""

    desktop_source: Optional[str] = None
    desktop_target: Optional[str] = None
    icon_source: Optional[str] = None
    icon_target: Optional[str] = None
    xdg_directories: Tuple[str, ...] = ()

    @property
    def has_desktop_entry(self) -> bool:
        return bool(self.desktop_source)

    @property
    def has_icon(self) -> bool:
        return bool(self.icon_source)

    @property
    def enabled(self) -> bool:
        return self.has_desktop_entry or self.has_icon


@dataclass(frozen=True)
class ManifestData:
    """Synthesis input for a cask or formula document.

    Identity fields are always required. A cask sets ``binary_path`` and
    ``binary_name`` (and optionally ``desktop``); a formula sets the install
    and test procedures plus ``dependencies``.
    """

    token: str
    version: str
    sha256: str
    url: str
    description: str = ""
    homepage: str = ""
    license: str = ""
    app_name: str = ""
    class_name: str = ""
    source_url: str = ""
    binary_path: str = ""
    binary_name: str = ""
    install_procedure: str = ""
    test_procedure: str = ""
    dependencies: Tuple[str, ...] = ()
    build_system: str = ""
    desktop: DesktopIntegration = field(default_factory=DesktopIntegration)
    cleanup_paths: Tuple[str, ...] = ()


@dataclass
class ChecksumReport:
    """Outcome of hashing a download and comparing with upstream sums."""

    digest: str
    verified: bool
    source: Optional[str] = None


@dataclass
class ArchiveReport:
    """Everything the introspector learned from an archive listing."""

    members: List[ArchiveMember]
    binaries: List[str]
    best_binary: Optional[str]
    desktop_entry: Optional[DesktopEntry]
    icon: Optional[IconRecord]
    root_directory: str = ""
