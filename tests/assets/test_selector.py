"""Tests for best-asset selection."""

from __future__ import annotations

import pytest

from tapgen.assets import classify_name, filter_eligible, select_best
from tapgen.errors import NoEligibleAssetError


def _classified(*names: str):
    return [classify_name(name) for name in names]


def test_tarball_beats_debian_package() -> None:
    assets = _classified("tool_1.0.0_amd64.deb", "tool-1.0.0-linux-x86_64.tar.gz")

    assert select_best(assets).name == "tool-1.0.0-linux-x86_64.tar.gz"


def test_x86_64_preferred_among_equal_priority() -> None:
    assets = _classified("tool-linux-arm64.tar.gz", "tool-linux-x86_64.tar.gz")

    assert select_best(assets).name == "tool-linux-x86_64.tar.gz"


def test_first_candidate_wins_without_x86_64() -> None:
    assets = _classified("tool-linux-armv7.tar.gz", "tool-linux-arm64.tar.gz")

    assert select_best(assets).name == "tool-linux-armv7.tar.gz"


def test_excluded_os_never_selected_when_target_exists() -> None:
    assets = _classified(
        "tool-darwin-x86_64.tar.gz",
        "tool-windows-x86_64.tar.gz",
        "tool-linux-arm64.tar.gz",
    )

    assert select_best(assets).name == "tool-linux-arm64.tar.gz"


def test_win_tarball_never_beats_linux_alternative() -> None:
    assets = _classified("tool-1.0-win-x64.tar.gz", "tool-1.0-linux-arm64.tar.gz")

    assert select_best(assets).name == "tool-1.0-linux-arm64.tar.gz"


def test_unmarked_emacs_tarball_is_eligible() -> None:
    assert select_best(_classified("emacs-29.1-x86_64.tar.gz")).name == "emacs-29.1-x86_64.tar.gz"


def test_unknown_os_tarball_is_eligible() -> None:
    assets = _classified("tool-1.0.tar.gz", "tool-darwin.tar.gz")

    assert select_best(assets).name == "tool-1.0.tar.gz"


def test_unknown_os_non_tarball_is_dropped() -> None:
    assets = _classified("tool.AppImage", "tool.zip")

    assert filter_eligible(assets) == []


def test_source_and_checksum_assets_are_filtered() -> None:
    assets = _classified(
        "tool-linux-source.tar.gz",
        "checksums.txt",
        "tool-linux-amd64.tar.gz",
    )

    eligible = filter_eligible(assets)

    assert [asset.name for asset in eligible] == ["tool-linux-amd64.tar.gz"]


def test_debian_chosen_when_no_tarball() -> None:
    assets = _classified("tool.x86_64.rpm", "tool_amd64.deb", "tool-linux.AppImage")

    assert select_best(assets).name == "tool_amd64.deb"


def test_no_eligible_assets_raises() -> None:
    assets = _classified("tool-darwin-arm64.tar.gz", "tool-windows-x64.zip")

    with pytest.raises(NoEligibleAssetError, match="No Linux assets"):
        select_best(assets)


def test_empty_asset_list_raises() -> None:
    with pytest.raises(NoEligibleAssetError):
        select_best([])
