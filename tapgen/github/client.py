"""Minimal GitHub REST client for repository, release, and file metadata."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.error import HTTPError, URLError
from urllib.parse import quote
from urllib.request import Request, urlopen

from ..errors import DownloadError, InvalidRepositoryError, NoReleaseError
from ..logging import get_logger
from ..models import ReleaseAsset, Release, Repository

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"

UNAUTHENTICATED_LIMIT = 60

Transport = Callable[[str, Mapping[str, str]], bytes]


@dataclass(frozen=True)
class RateLimit:
    """Core REST API quota as reported by ``/rate_limit``."""

    limit: int
    remaining: int
    reset: datetime

    @property
    def is_low(self) -> bool:
        # Under 100 left, or under 10% for small (unauthenticated) limits.
        threshold = 100 if self.limit >= 1000 else self.limit // 10
        return self.remaining < threshold


def parse_repo_url(url: str) -> Tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub URL or ``owner/repo`` string.

    Accepts ``https://github.com/owner/repo``, ``github.com/owner/repo`` and
    ``owner/repo``; a trailing ``.git`` is removed.
    """
    cleaned = url.strip().rstrip("/")
    for prefix in ("https://", "http://"):
        if cleaned.startswith(prefix):
            cleaned = cleaned[len(prefix):]
    if cleaned.startswith("www."):
        cleaned = cleaned[len("www."):]
    if cleaned.startswith("github.com/"):
        cleaned = cleaned[len("github.com/"):]

    parts = cleaned.split("/")
    if len(parts) < 2:
        raise InvalidRepositoryError(
            f"Invalid GitHub URL: {url} (expected format: owner/repo)"
        )
    owner = parts[0]
    repo = parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not owner or not repo:
        raise InvalidRepositoryError("Invalid GitHub URL: owner or repo cannot be empty")
    return owner, repo


class GitHubClient:
    """Fetches repository metadata, releases and root file listings."""

    def __init__(
        self,
        *,
        api_url: str = DEFAULT_API_URL,
        token: Optional[str] = None,
        token_env: str = DEFAULT_TOKEN_ENV,
        request_timeout: Optional[float] = None,
        transport: Transport | None = None,
        rate_limit_check: bool = True,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.token = token if token is not None else os.getenv(token_env) or None
        self.token_env = token_env
        self.request_timeout = request_timeout
        self.rate_limit_check = rate_limit_check
        self._transport = transport or self._default_transport
        self.logger = get_logger("github")
        if not self.token:
            self.logger.debug(
                "%s not set; using unauthenticated GitHub API rate limits", token_env
            )

    def get_repository(self, owner: str, repo: str) -> Repository:
        payload = self._get_json(f"/repos/{_q(owner)}/{_q(repo)}")
        if not isinstance(payload, dict):
            raise DownloadError(self._url(f"/repos/{owner}/{repo}"), "unexpected response")
        license_info = payload.get("license")
        spdx = ""
        if isinstance(license_info, dict):
            spdx_id = license_info.get("spdx_id")
            if isinstance(spdx_id, str) and spdx_id != "NOASSERTION":
                spdx = spdx_id
        return Repository(
            owner=owner,
            name=repo,
            description=_as_str(payload.get("description")),
            homepage=_as_str(payload.get("homepage")),
            license=spdx,
        )

    def get_latest_release(self, owner: str, repo: str) -> Release:
        """Return the latest non-prerelease, non-draft release."""
        path = f"/repos/{_q(owner)}/{_q(repo)}/releases/latest"
        try:
            payload = self._get_json(path)
        except DownloadError as exc:
            if exc.reason == "HTTP 404":
                raise NoReleaseError(f"No published releases found for {owner}/{repo}") from exc
            raise
        if not isinstance(payload, dict):
            raise NoReleaseError(f"No published releases found for {owner}/{repo}")
        return _convert_release(payload)

    def get_all_releases(self, owner: str, repo: str) -> List[Release]:
        payload = self._get_json(f"/repos/{_q(owner)}/{_q(repo)}/releases?per_page=100")
        if not isinstance(payload, list):
            return []
        return [_convert_release(item) for item in payload if isinstance(item, dict)]

    def get_repo_files(self, owner: str, repo: str) -> List[str]:
        """Return the names of regular files at the repository root."""
        payload = self._get_json(f"/repos/{_q(owner)}/{_q(repo)}/contents/")
        if not isinstance(payload, list):
            return []
        return [
            str(item.get("name"))
            for item in payload
            if isinstance(item, dict) and item.get("type") == "file" and item.get("name")
        ]

    def get_rate_limit(self) -> RateLimit:
        """Return the core API quota from ``/rate_limit``."""
        payload = self._request_json("/rate_limit")
        core: Any = {}
        if isinstance(payload, dict):
            resources = payload.get("resources")
            if isinstance(resources, dict):
                core = resources.get("core") or {}
        if not isinstance(core, dict):
            core = {}
        return RateLimit(
            limit=int(core.get("limit") or 0),
            remaining=int(core.get("remaining") or 0),
            reset=datetime.fromtimestamp(int(core.get("reset") or 0), tz=timezone.utc),
        )

    def check_rate_limit(self) -> Optional[RateLimit]:
        """Warn when the API quota is running low; never raises."""
        try:
            rate = self.get_rate_limit()
        except (DownloadError, ValueError, TypeError, OverflowError) as exc:
            self.logger.warning("Could not check GitHub API rate limit: %s", exc)
            return None
        if rate.is_low:
            minutes = max(0, round((rate.reset - datetime.now(timezone.utc)).total_seconds() / 60))
            self.logger.warning(
                "GitHub API rate limit low: %d/%d remaining", rate.remaining, rate.limit
            )
            self.logger.warning("Resets at %s (in %d min)", rate.reset.isoformat(), minutes)
            if rate.limit == UNAUTHENTICATED_LIMIT:
                self.logger.warning(
                    "Using the unauthenticated limit (60/hour); set %s to raise it to 5,000/hour",
                    self.token_env,
                )
        return rate

    # ------------------------------------------------------------------
    # Helpers

    def _url(self, path: str) -> str:
        return f"{self.api_url}{path}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "tapgen",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _get_json(self, path: str) -> Any:
        if self.rate_limit_check:
            self.check_rate_limit()
        return self._request_json(path)

    def _request_json(self, path: str) -> Any:
        url = self._url(path)
        self.logger.debug("GET %s", url)
        raw = self._transport(url, self._headers())
        try:
            return json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DownloadError(url, "invalid JSON response") from exc

    def _default_transport(self, url: str, headers: Mapping[str, str]) -> bytes:
        request = Request(url, headers=dict(headers))
        try:
            if self.request_timeout is None:
                response = urlopen(request)
            else:
                response = urlopen(request, timeout=self.request_timeout)
            with response:
                return response.read()
        except HTTPError as exc:
            raise DownloadError(url, f"HTTP {exc.code}") from exc
        except URLError as exc:
            raise DownloadError(url, str(exc.reason)) from exc


def _convert_release(payload: Mapping[str, Any]) -> Release:
    assets: List[ReleaseAsset] = []
    raw_assets = payload.get("assets")
    if isinstance(raw_assets, list):
        for item in raw_assets:
            if not isinstance(item, dict):
                continue
            assets.append(
                ReleaseAsset(
                    name=_as_str(item.get("name")),
                    download_url=_as_str(item.get("browser_download_url")),
                    size_bytes=int(item.get("size") or 0),
                )
            )
    published = _as_str(payload.get("published_at"))
    return Release(
        tag_name=_as_str(payload.get("tag_name")),
        name=_as_str(payload.get("name")),
        prerelease=bool(payload.get("prerelease")),
        draft=bool(payload.get("draft")),
        published_at=published[:10],
        assets=tuple(assets),
    )


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _q(value: str) -> str:
    return quote(value, safe="")


__all__ = ["DEFAULT_API_URL", "GitHubClient", "RateLimit", "parse_repo_url"]
