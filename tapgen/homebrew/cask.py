"""Cask synthesis for prebuilt Linux artifacts."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from ..archive.desktop import xdg_directories
from ..models import DesktopEntry, DesktopIntegration, IconRecord, ManifestData
from ..naming import ruby_escape, slugify
from .document import ManifestBuilder, ManifestDocument, ManifestRenderer, generation_header, ruby_string

TOOL_NAME = "tapgen cask"

XDG_DATA_HOME = 'ENV.fetch("XDG_DATA_HOME", "#{Dir.home}/.local/share")'
XDG_CONFIG_HOME = 'ENV.fetch("XDG_CONFIG_HOME", "#{Dir.home}/.config")'
XDG_CACHE_HOME = 'ENV.fetch("XDG_CACHE_HOME", "#{Dir.home}/.cache")'

_ARTICLES: Tuple[str, ...] = ("A ", "An ", "The ")


def clean_description(description: str) -> str:
    """Turn a sentence-style description into a noun phrase."""
    cleaned = description.strip()
    for article in _ARTICLES:
        if cleaned.startswith(article):
            cleaned = cleaned[len(article):]
            break
    if cleaned.endswith("."):
        cleaned = cleaned[:-1]
    return cleaned.strip()


def infer_cleanup_paths(app_name: str) -> Tuple[str, ...]:
    """Return the XDG config/cache/data directories an app is likely to create."""
    slug = slugify(app_name)
    if not slug:
        return ()
    return (
        f"#{{{XDG_CONFIG_HOME}}}/{slug}",
        f"#{{{XDG_CACHE_HOME}}}/{slug}",
        f"#{{{XDG_DATA_HOME}}}/{slug}",
    )


def desktop_integration(
    desktop_entry: Optional[DesktopEntry],
    icon: Optional[IconRecord],
) -> DesktopIntegration:
    return DesktopIntegration(
        desktop_source=desktop_entry.path if desktop_entry else None,
        desktop_target=desktop_entry.filename if desktop_entry else None,
        icon_source=icon.path if icon else None,
        icon_target=icon.filename if icon else None,
        xdg_directories=xdg_directories(desktop_entry is not None, icon is not None),
    )


def homepage_for(data: ManifestData) -> str:
    return data.homepage or data.source_url or f"https://github.com/{data.app_name}"


def build_cask(data: ManifestData) -> ManifestDocument:
    """Assemble the cask document; desktop stanzas only appear when detected."""
    builder = ManifestBuilder()
    builder.header(*generation_header(TOOL_NAME, data.source_url))
    builder.opening(f"cask {ruby_string(data.token)} do")

    builder.stanza(
        [
            f"version {ruby_string(data.version)}",
            f"sha256 {ruby_string(data.sha256)}",
        ]
    )

    metadata = [f"url {ruby_string(data.url)}"]
    if data.app_name:
        metadata.append(f"name {ruby_string(data.app_name)}")
    description = clean_description(data.description)
    if description:
        metadata.append(f"desc {ruby_string(description)}")
    metadata.append(f"homepage {ruby_string(homepage_for(data))}")
    builder.stanza(metadata)

    if data.desktop.enabled:
        builder.stanza(_preflight_lines(data))

    builder.stanza(_artifact_lines(data))

    cleanup = sorted(data.cleanup_paths)
    if cleanup:
        builder.stanza(_zap_lines(cleanup))

    return builder.build()


def render_cask(data: ManifestData, renderer: ManifestRenderer | None = None) -> str:
    return (renderer or ManifestRenderer()).render(build_cask(data))


def _preflight_lines(data: ManifestData) -> List[str]:
    desktop = data.desktop
    binary_name = ruby_escape(data.binary_name)
    icon_target = ruby_escape(desktop.icon_target or "")
    lines = ["preflight do", f"  xdg_data_home = {XDG_DATA_HOME}"]
    for directory in desktop.xdg_directories:
        lines.append(f'  system_command "mkdir", args: ["-p", "#{{xdg_data_home}}/{directory}"]')

    if desktop.has_desktop_entry:
        lines.extend(
            [
                "",
                f"  desktop_file = staged_path.join({ruby_string(desktop.desktop_source or '')})",
                "  if desktop_file.exist?",
                "    content = desktop_file.read",
                f'    content.gsub!(/^Exec=.*/, "Exec=#{{HOMEBREW_PREFIX}}/bin/{binary_name}")',
            ]
        )
        if desktop.has_icon:
            lines.append(
                f'    content.gsub!(/^Icon=.*/, "Icon=#{{xdg_data_home}}/icons/{icon_target}")'
            )
        lines.extend(["    desktop_file.write(content)", "  end"])

    lines.append("end")
    return lines


def _artifact_lines(data: ManifestData) -> List[str]:
    lines: List[str] = []
    if data.binary_path:
        lines.append(
            f"binary {ruby_string(data.binary_path)}, target: {ruby_string(data.binary_name)}"
        )
    desktop = data.desktop
    if desktop.has_desktop_entry:
        lines.append(
            f"artifact {ruby_string(desktop.desktop_source or '')}, "
            f'target: "#{{{XDG_DATA_HOME}}}/applications/{ruby_escape(desktop.desktop_target or "")}"'
        )
    if desktop.has_icon:
        lines.append(
            f"artifact {ruby_string(desktop.icon_source or '')}, "
            f'target: "#{{{XDG_DATA_HOME}}}/icons/{ruby_escape(desktop.icon_target or "")}"'
        )
    return lines


def _zap_lines(paths: Sequence[str]) -> List[str]:
    lines = ["zap trash: ["]
    lines.extend(f'  "{path}",' for path in paths)
    lines.append("]")
    return lines


def cleanup_paths_for(app_name: str, extra: Iterable[str] = ()) -> Tuple[str, ...]:
    return tuple(sorted(set(infer_cleanup_paths(app_name)) | set(extra)))


__all__ = [
    "build_cask",
    "clean_description",
    "cleanup_paths_for",
    "desktop_integration",
    "homepage_for",
    "infer_cleanup_paths",
    "render_cask",
]
