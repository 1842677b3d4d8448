"""Select the canonical Linux artifact from classified release assets."""

from __future__ import annotations

from typing import List, Sequence

from ..errors import NoEligibleAssetError
from ..logging import get_logger
from ..models import Architecture, ClassifiedAsset, OSFamily

logger = get_logger("assets.selector")


def is_eligible(asset: ClassifiedAsset) -> bool:
    if asset.is_source_archive or asset.is_checksum_file:
        return False
    if asset.os_family is OSFamily.OTHER:
        return False
    if asset.os_family is OSFamily.UNKNOWN:
        # Unmarked tarballs are tentatively treated as OS-agnostic.
        return asset.package_format.is_tarball
    return True


def filter_eligible(assets: Sequence[ClassifiedAsset]) -> List[ClassifiedAsset]:
    """Drop source archives, checksum files, and assets for other platforms."""
    eligible = [asset for asset in assets if is_eligible(asset)]
    for asset in assets:
        if asset not in eligible:
            logger.debug("Skipping asset %s", asset.name)
    return eligible


def select_best(assets: Sequence[ClassifiedAsset]) -> ClassifiedAsset:
    """Return the most preferred eligible asset.

    The lowest priority class wins; among equals an x86_64 build is preferred,
    falling back to the first remaining asset in input order.
    """
    eligible = filter_eligible(assets)
    if not eligible:
        raise NoEligibleAssetError("No Linux assets found in release")

    best_priority = min(asset.priority_class for asset in eligible)
    candidates = [asset for asset in eligible if asset.priority_class == best_priority]
    if len(candidates) == 1:
        return candidates[0]

    for asset in candidates:
        if asset.architecture is Architecture.X86_64:
            return asset
    return candidates[0]


__all__ = ["filter_eligible", "is_eligible", "select_best"]
