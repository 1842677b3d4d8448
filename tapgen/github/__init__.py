"""GitHub release metadata provider."""

from .client import GitHubClient, RateLimit, parse_repo_url

__all__ = ["GitHubClient", "RateLimit", "parse_repo_url"]
