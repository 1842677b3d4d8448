"""Helpers for building release payloads and fake downloads in tests."""

from __future__ import annotations

import io
import tarfile
from typing import Dict, List, Mapping

from tapgen.errors import DownloadError


def build_tarball(members: Mapping[str, bytes], mode: str = "w:gz") -> bytes:
    """Return the bytes of an in-memory tarball containing ``members``."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode=mode) as archive:
        for name, data in members.items():
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o755
            archive.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


class FakeFetcher:
    """URL -> bytes map standing in for HTTP downloads; unknown URLs 404."""

    def __init__(self, responses: Mapping[str, bytes] | None = None) -> None:
        self.responses: Dict[str, bytes] = dict(responses or {})
        self.calls: List[str] = []

    def __call__(self, url: str) -> bytes:
        self.calls.append(url)
        if url not in self.responses:
            raise DownloadError(url, "HTTP 404")
        return self.responses[url]


__all__ = ["FakeFetcher", "build_tarball"]
