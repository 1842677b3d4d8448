"""Homebrew cask and formula synthesis."""

from .cask import build_cask, clean_description, infer_cleanup_paths, render_cask
from .document import ManifestBuilder, ManifestDocument, ManifestRenderer, Stanza
from .formula import build_formula, new_binary_formula, new_source_formula, render_formula

__all__ = [
    "ManifestBuilder",
    "ManifestDocument",
    "ManifestRenderer",
    "Stanza",
    "build_cask",
    "build_formula",
    "clean_description",
    "infer_cleanup_paths",
    "new_binary_formula",
    "new_source_formula",
    "render_cask",
    "render_formula",
]
