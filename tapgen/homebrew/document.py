"""Structured manifest representation and its jinja2 serialisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from ..errors import RenderError
from ..naming import ruby_string

INDENT = "  "
MAGIC_COMMENTS: tuple[str, ...] = ("# typed: strict", "# frozen_string_literal: true")
TEMPLATE_NAME = "manifest.rb.j2"


@dataclass(frozen=True)
class Stanza:
    """A group of lines rendered together; stanzas are separated by blank lines.

    Lines carry indentation relative to the stanza, not the document.
    """

    lines: tuple[str, ...]


@dataclass
class ManifestDocument:
    header: List[str] = field(default_factory=list)
    opening: List[str] = field(default_factory=list)
    stanzas: List[Stanza] = field(default_factory=list)
    closing: str = "end"


class ManifestBuilder:
    """Accumulates header, opening and stanzas, skipping empty stanzas."""

    def __init__(self) -> None:
        self._document = ManifestDocument()

    def header(self, *lines: str) -> "ManifestBuilder":
        self._document.header.extend(lines)
        return self

    def opening(self, *lines: str) -> "ManifestBuilder":
        self._document.opening.extend(lines)
        return self

    def stanza(self, lines: Iterable[str]) -> "ManifestBuilder":
        collected = tuple(lines)
        if collected:
            self._document.stanzas.append(Stanza(lines=collected))
        return self

    def block(self, text: str) -> "ManifestBuilder":
        """Add a multi-line Ruby block (``def install ... end``) as one stanza."""
        return self.stanza(text.splitlines())

    def build(self) -> ManifestDocument:
        return self._document


def generation_header(tool: str, source_url: str) -> List[str]:
    lines = list(MAGIC_COMMENTS)
    if source_url:
        lines.extend(["", f"# Generated by {tool} from {source_url}"])
    return lines


def _body_line(line: str) -> str:
    return INDENT + line if line else ""


class ManifestRenderer:
    """Serialises a :class:`ManifestDocument` through the bundled template."""

    def __init__(self, templates_dir: Path | None = None) -> None:
        self.templates_dir = templates_dir or Path(__file__).with_name("templates")
        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )
        self._env.filters["body_line"] = _body_line

    def render(self, document: ManifestDocument) -> str:
        try:
            template = self._env.get_template(TEMPLATE_NAME)
            return template.render(document=document)
        except TemplateError as exc:
            raise RenderError(f"Failed to render manifest: {exc}") from exc


__all__ = [
    "ManifestBuilder",
    "ManifestDocument",
    "ManifestRenderer",
    "Stanza",
    "generation_header",
    "ruby_string",
]
