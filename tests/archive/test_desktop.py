"""Tests for desktop-entry and icon selection."""

from __future__ import annotations

import pytest

from tapgen.archive.desktop import (
    detect_desktop_entry,
    detect_icon,
    extract_icon_size,
    icon_candidates,
    is_icon_candidate,
    score_icon,
    xdg_directories,
)
from tapgen.models import IconRecord


def test_larger_icon_wins() -> None:
    icon = detect_icon(["icons/48x48/app.png", "icons/128x128/app.png"])

    assert icon is not None
    assert icon.path == "icons/128x128/app.png"


def test_order_of_candidates_does_not_change_larger_choice() -> None:
    icon = detect_icon(["icons/128x128/app.png", "icons/48x48/app.png"])

    assert icon is not None
    assert icon.path == "icons/128x128/app.png"


def test_svg_beats_png_at_same_size() -> None:
    icon = detect_icon(["icons/256x256/app.png", "icons/256x256/app.svg"])

    assert icon is not None
    assert icon.filename == "app.svg"


def test_equal_scores_keep_first_candidate() -> None:
    icon = detect_icon(["icons/64x64/one.png", "pixmaps/64x64/two.png"])

    assert icon is not None
    assert icon.filename == "one.png"


def test_no_icons_returns_none() -> None:
    assert detect_icon(["bin/app", "README.md"]) is None


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("share/icons/hicolor/256x256/apps/app.png", "hicolor"),
        ("share/icons/scalable/app.svg", "scalable"),
        ("icons/512x512/app.png", "512x512"),
        ("icons/app.png", "unknown"),
    ],
)
def test_extract_icon_size(path: str, expected: str) -> None:
    assert extract_icon_size(path) == expected


def test_icon_candidates_require_icon_location_or_name() -> None:
    assert is_icon_candidate("app/icons/app.png") is True
    assert is_icon_candidate("app/share/pixmaps/app.xpm") is True
    assert is_icon_candidate("app/app-icon.png") is True
    assert is_icon_candidate("app/screenshot.png") is False
    assert is_icon_candidate("app/icons/readme.txt") is False


def test_score_icon_uses_size_and_format() -> None:
    large_png = IconRecord(path="a/512x512/a.png", filename="a.png", size_token="512x512")
    odd_size_ico = IconRecord(path="icons/a.ico", filename="a.ico", size_token="unknown")

    assert score_icon(large_png) == 1090
    assert score_icon(odd_size_ico) == 350


def test_icon_candidates_preserve_order() -> None:
    records = icon_candidates(["icons/b.png", "bin/app", "icons/a.svg"])

    assert [record.filename for record in records] == ["b.png", "a.svg"]


def test_first_desktop_entry_is_selected() -> None:
    entry = detect_desktop_entry(["app/bin/app", "app/share/applications/app.desktop", "app/other.desktop"])

    assert entry is not None
    assert entry.path == "app/share/applications/app.desktop"
    assert entry.filename == "app.desktop"
    assert detect_desktop_entry(["app/bin/app"]) is None


def test_xdg_directories() -> None:
    assert xdg_directories(True, True) == ("applications", "icons")
    assert xdg_directories(False, True) == ("icons",)
    assert xdg_directories(False, False) == ()
