"""Download helpers and SHA-256 verification against upstream checksum files."""

from __future__ import annotations

import hashlib
import posixpath
import re
from typing import Callable, Dict, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from .errors import ChecksumMismatchError, DownloadError
from .logging import get_logger
from .models import ChecksumReport

logger = get_logger("checksum")

UPSTREAM_CHECKSUM_FILES: tuple[str, ...] = (
    "checksums.txt",
    "sha256sums.txt",
    "SHA256SUMS",
    "SHA256SUMS.txt",
    "checksums.sha256",
)

_CHECKSUM_LINE = re.compile(r"^([a-fA-F0-9]{64})\s+\*?(.+)$")

Fetcher = Callable[[str], bytes]


def download(url: str, *, timeout: Optional[float] = None, user_agent: str = "tapgen") -> bytes:
    """Fetch ``url`` and return the fully buffered body."""
    request = Request(url, headers={"User-Agent": user_agent})
    try:
        if timeout is None:
            response = urlopen(request)
        else:
            response = urlopen(request, timeout=timeout)
        with response:
            return response.read()
    except HTTPError as exc:
        raise DownloadError(url, f"HTTP {exc.code}") from exc
    except URLError as exc:
        raise DownloadError(url, str(exc.reason)) from exc


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def verify(data: bytes, expected: str, *, filename: str = "download") -> str:
    """Return the digest of ``data`` or raise when it differs from ``expected``."""
    actual = sha256_hex(data)
    if actual != expected.strip().lower():
        raise ChecksumMismatchError(filename, expected, actual)
    return actual


def parse_checksum_file(content: str) -> Dict[str, str]:
    """Parse ``<digest>  <name>`` and ``<digest> *<name>`` lines.

    Blank lines and ``#`` comments are skipped; digests are lower-cased.
    """
    checksums: Dict[str, str] = {}
    for raw in content.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        match = _CHECKSUM_LINE.match(line)
        if match is None:
            continue
        filename = match.group(2).strip()
        if filename:
            checksums[filename] = match.group(1).lower()
    return checksums


def format_checksum_line(digest: str, filename: str) -> str:
    return f"{digest.lower()}  {filename}"


def lookup_digest(checksums: Dict[str, str], asset_name: str) -> Optional[str]:
    """Find the digest for ``asset_name``, tolerating ``./`` or directory prefixes."""
    if asset_name in checksums:
        return checksums[asset_name]
    for filename, digest in checksums.items():
        if posixpath.basename(filename) == asset_name:
            return digest
    return None


def release_base_url(asset_url: str) -> str:
    """Return the directory portion of a release asset URL, with trailing slash."""
    index = asset_url.rfind("/")
    if index == -1:
        return asset_url
    return asset_url[: index + 1]


def find_upstream_checksums(
    asset_url: str,
    *,
    fetch: Fetcher = download,
    candidates: Sequence[str] = UPSTREAM_CHECKSUM_FILES,
) -> tuple[Optional[str], Dict[str, str]]:
    """Try the conventional checksum manifests published next to an asset.

    Returns the URL of the first manifest that parsed to at least one entry and
    its entries, or ``(None, {})`` when nothing was found.
    """
    base_url = release_base_url(asset_url)
    for name in candidates:
        url = base_url + name
        try:
            data = fetch(url)
        except DownloadError as exc:
            logger.debug("No checksum manifest at %s (%s)", url, exc.reason)
            continue
        checksums = parse_checksum_file(data.decode("utf-8", errors="replace"))
        if checksums:
            return url, checksums
    return None, {}


def verify_against_upstream(
    data: bytes,
    asset_name: str,
    asset_url: str,
    *,
    fetch: Fetcher = download,
) -> ChecksumReport:
    """Hash ``data`` and compare it with any upstream-published digest.

    A missing manifest or a manifest without this asset is not an error; a
    differing digest always raises :class:`ChecksumMismatchError`.
    """
    digest = sha256_hex(data)
    source, checksums = find_upstream_checksums(asset_url, fetch=fetch)
    if source is None:
        logger.info("No upstream checksums found (not an error)")
        return ChecksumReport(digest=digest, verified=False)

    expected = lookup_digest(checksums, asset_name)
    if expected is None:
        logger.info("%s is not listed in %s (not an error)", asset_name, source)
        return ChecksumReport(digest=digest, verified=False, source=source)

    if expected != digest:
        raise ChecksumMismatchError(asset_name, expected, digest)
    logger.info("Checksum verified against %s", source)
    return ChecksumReport(digest=digest, verified=True, source=source)


__all__ = [
    "UPSTREAM_CHECKSUM_FILES",
    "download",
    "find_upstream_checksums",
    "format_checksum_line",
    "lookup_digest",
    "parse_checksum_file",
    "release_base_url",
    "sha256_hex",
    "verify",
    "verify_against_upstream",
]
