"""Tests for the GitHub release metadata client."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Tuple

import pytest

from tapgen.errors import DownloadError, InvalidRepositoryError, NoReleaseError
from tapgen.github import GitHubClient, RateLimit, parse_repo_url

API = "https://api.test"


class FakeTransport:
    """Serves canned JSON payloads keyed by URL."""

    def __init__(self, payloads: Mapping[str, Any]) -> None:
        self.payloads = dict(payloads)
        self.requests: List[Tuple[str, Dict[str, str]]] = []

    def __call__(self, url: str, headers: Mapping[str, str]) -> bytes:
        self.requests.append((url, dict(headers)))
        if url not in self.payloads:
            raise DownloadError(url, "HTTP 404")
        return json.dumps(self.payloads[url]).encode("utf-8")


@pytest.mark.parametrize(
    "value",
    [
        "https://github.com/cli/cli",
        "https://github.com/cli/cli/",
        "http://www.github.com/cli/cli.git",
        "github.com/cli/cli",
        "cli/cli",
        "https://github.com/cli/cli/releases/latest",
    ],
)
def test_parse_repo_url_variants(value: str) -> None:
    assert parse_repo_url(value) == ("cli", "cli")


@pytest.mark.parametrize("value", ["", "cli", "https://github.com/cli", "/repo"])
def test_parse_repo_url_rejects_invalid(value: str) -> None:
    with pytest.raises(InvalidRepositoryError):
        parse_repo_url(value)


def test_get_repository_reads_license_and_metadata() -> None:
    transport = FakeTransport(
        {
            f"{API}/repos/acme/tool": {
                "description": "A tool.",
                "homepage": "https://tool.dev",
                "license": {"spdx_id": "Apache-2.0"},
            }
        }
    )
    client = GitHubClient(api_url=API, token="", transport=transport)

    repository = client.get_repository("acme", "tool")

    assert repository.description == "A tool."
    assert repository.homepage == "https://tool.dev"
    assert repository.license == "Apache-2.0"
    assert repository.url == "https://github.com/acme/tool"


def test_noassertion_license_is_dropped() -> None:
    transport = FakeTransport(
        {f"{API}/repos/acme/tool": {"description": None, "license": {"spdx_id": "NOASSERTION"}}}
    )
    client = GitHubClient(api_url=API, token="", transport=transport)

    repository = client.get_repository("acme", "tool")

    assert repository.license == ""
    assert repository.description == ""


def test_latest_release_converts_assets() -> None:
    transport = FakeTransport(
        {
            f"{API}/repos/acme/tool/releases/latest": {
                "tag_name": "v1.2.3",
                "name": "1.2.3",
                "published_at": "2024-05-01T10:00:00Z",
                "assets": [
                    {
                        "name": "tool-linux-amd64.tar.gz",
                        "browser_download_url": "https://dl/tool-linux-amd64.tar.gz",
                        "size": 1024,
                    }
                ],
            }
        }
    )
    client = GitHubClient(api_url=API, token="", transport=transport)

    release = client.get_latest_release("acme", "tool")

    assert release.tag_name == "v1.2.3"
    assert release.version == "1.2.3"
    assert release.published_at == "2024-05-01"
    assert release.assets[0].download_url == "https://dl/tool-linux-amd64.tar.gz"
    assert release.assets[0].size_bytes == 1024


def test_latest_release_404_means_no_release() -> None:
    client = GitHubClient(api_url=API, token="", transport=FakeTransport({}))

    with pytest.raises(NoReleaseError):
        client.get_latest_release("acme", "tool")


def test_repo_files_only_lists_regular_files() -> None:
    transport = FakeTransport(
        {
            f"{API}/repos/acme/tool/contents/": [
                {"name": "go.mod", "type": "file"},
                {"name": "cmd", "type": "dir"},
                {"name": "Makefile", "type": "file"},
            ]
        }
    )
    client = GitHubClient(api_url=API, token="", transport=transport)

    assert client.get_repo_files("acme", "tool") == ["go.mod", "Makefile"]


def test_all_releases() -> None:
    transport = FakeTransport(
        {f"{API}/repos/acme/tool/releases?per_page=100": [{"tag_name": "v2"}, {"tag_name": "v1"}]}
    )
    client = GitHubClient(api_url=API, token="", transport=transport)

    assert [release.tag_name for release in client.get_all_releases("acme", "tool")] == ["v2", "v1"]


def test_token_from_environment_is_sent(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TAPGEN_TEST_TOKEN", "secret")
    transport = FakeTransport({f"{API}/repos/acme/tool/contents/": []})
    client = GitHubClient(api_url=API, token_env="TAPGEN_TEST_TOKEN", transport=transport)

    client.get_repo_files("acme", "tool")

    _, headers = transport.requests[0]
    assert headers["Authorization"] == "Bearer secret"


def test_invalid_json_raises_download_error() -> None:
    client = GitHubClient(api_url=API, token="", transport=lambda url, headers: b"<html>")

    with pytest.raises(DownloadError, match="invalid JSON"):
        client.get_repo_files("acme", "tool")


def _rate_payload(limit: int, remaining: int, reset: int = 1_700_000_000) -> Dict[str, Any]:
    return {"resources": {"core": {"limit": limit, "remaining": remaining, "reset": reset}}}


@pytest.fixture
def github_records(caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch):
    # configure_logging() in other tests turns propagation off for the package logger.
    monkeypatch.setattr(logging.getLogger("tapgen"), "propagate", True)
    caplog.set_level(logging.WARNING, logger="tapgen.github")
    return caplog


def test_rate_limit_is_checked_before_each_request() -> None:
    transport = FakeTransport(
        {
            f"{API}/rate_limit": _rate_payload(5000, 4999),
            f"{API}/repos/acme/tool/contents/": [],
        }
    )
    client = GitHubClient(api_url=API, token="t", transport=transport)

    client.get_repo_files("acme", "tool")

    assert [url for url, _ in transport.requests] == [
        f"{API}/rate_limit",
        f"{API}/repos/acme/tool/contents/",
    ]


def test_get_rate_limit_parses_core_quota() -> None:
    transport = FakeTransport({f"{API}/rate_limit": _rate_payload(60, 7, reset=0)})
    client = GitHubClient(api_url=API, token="", transport=transport)

    rate = client.get_rate_limit()

    assert (rate.limit, rate.remaining) == (60, 7)
    assert rate.reset == datetime(1970, 1, 1, tzinfo=timezone.utc)
    assert rate.is_low is False


@pytest.mark.parametrize(
    ("limit", "remaining", "low"),
    [(5000, 99, True), (5000, 100, False), (60, 5, True), (60, 6, False)],
)
def test_rate_limit_thresholds(limit: int, remaining: int, low: bool) -> None:
    rate = RateLimit(limit=limit, remaining=remaining, reset=datetime.now(timezone.utc))

    assert rate.is_low is low


def test_low_unauthenticated_quota_warns_with_token_hint(github_records) -> None:
    transport = FakeTransport(
        {
            f"{API}/rate_limit": _rate_payload(60, 2),
            f"{API}/repos/acme/tool/contents/": [],
        }
    )
    client = GitHubClient(api_url=API, token="", token_env="TAPGEN_TOKEN", transport=transport)

    assert client.get_repo_files("acme", "tool") == []

    messages = [record.getMessage() for record in github_records.records]
    assert "GitHub API rate limit low: 2/60 remaining" in messages
    assert any(message.startswith("Resets at 2023-11-14T22:13:20+00:00") for message in messages)
    assert any("set TAPGEN_TOKEN" in message for message in messages)


def test_failed_rate_limit_check_does_not_block_requests(github_records) -> None:
    transport = FakeTransport({f"{API}/repos/acme/tool/contents/": [{"name": "go.mod", "type": "file"}]})
    client = GitHubClient(api_url=API, token="", transport=transport)

    assert client.check_rate_limit() is None
    assert client.get_repo_files("acme", "tool") == ["go.mod"]
    assert any(
        "Could not check GitHub API rate limit" in record.getMessage()
        for record in github_records.records
    )


def test_rate_limit_check_can_be_disabled() -> None:
    transport = FakeTransport({f"{API}/repos/acme/tool/contents/": []})
    client = GitHubClient(api_url=API, token="", transport=transport, rate_limit_check=False)

    client.get_repo_files("acme", "tool")

    assert [url for url, _ in transport.requests] == [f"{API}/repos/acme/tool/contents/"]
