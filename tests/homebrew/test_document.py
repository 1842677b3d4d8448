"""Tests for the manifest document builder and renderer."""

from __future__ import annotations

from pathlib import Path

import pytest

from tapgen.errors import RenderError
from tapgen.homebrew.document import (
    ManifestBuilder,
    ManifestRenderer,
    generation_header,
    ruby_string,
)


def test_builder_skips_empty_stanzas() -> None:
    document = (
        ManifestBuilder()
        .opening('cask "x" do')
        .stanza([])
        .stanza(['version "1"'])
        .block("")
        .build()
    )

    assert len(document.stanzas) == 1
    assert document.stanzas[0].lines == ('version "1"',)


def test_renderer_separates_stanzas_with_blank_lines() -> None:
    document = (
        ManifestBuilder()
        .opening('cask "x" do')
        .stanza(['version "1"'])
        .block("def install\n  bin.install \"x\"\nend")
        .build()
    )

    assert ManifestRenderer().render(document) == (
        'cask "x" do\n'
        '  version "1"\n'
        "\n"
        "  def install\n"
        '    bin.install "x"\n'
        "  end\n"
        "end\n"
    )


def test_blank_lines_inside_stanza_carry_no_indentation() -> None:
    document = ManifestBuilder().opening("x do").stanza(["a", "", "b"]).build()

    assert ManifestRenderer().render(document) == "x do\n  a\n\n  b\nend\n"


def test_generation_header_without_source() -> None:
    assert generation_header("tapgen cask", "") == [
        "# typed: strict",
        "# frozen_string_literal: true",
    ]


def test_ruby_string_escapes() -> None:
    assert ruby_string('a"b') == '"a\\"b"'
    assert ruby_string("back\\slash") == '"back\\\\slash"'
    assert ruby_string("#{x}") == '"\\#{x}"'


def test_missing_template_raises_render_error(tmp_path: Path) -> None:
    renderer = ManifestRenderer(templates_dir=tmp_path)

    with pytest.raises(RenderError):
        renderer.render(ManifestBuilder().opening("x do").build())
