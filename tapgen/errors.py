"""Exception hierarchy for tapgen pipelines."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from tapgen.validation import ValidationResult


class TapgenError(RuntimeError):
    """Base class for every error raised by tapgen."""


class ConfigError(TapgenError):
    """Raised when the configuration file cannot be parsed."""


class InputError(TapgenError):
    """The requested repository or release cannot produce a manifest."""


class InvalidRepositoryError(InputError):
    """Repository identifier could not be parsed."""


class NoReleaseError(InputError):
    """The repository has no usable published release."""


class NoEligibleAssetError(InputError):
    """No release asset survived platform filtering."""


class NoBuildSystemError(InputError):
    """No supported build system was found in the repository root."""


class DownloadError(TapgenError):
    """A network fetch failed."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to download {url}: {reason}")
        self.url = url
        self.reason = reason


class ArchiveError(TapgenError):
    """Archive content could not be read."""


class UnsupportedArchiveError(ArchiveError):
    """The archive container format is not supported."""


class ChecksumMismatchError(TapgenError):
    """Computed digest differs from an upstream-published digest."""

    def __init__(self, filename: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Checksum mismatch for {filename}: expected {expected}, got {actual}"
        )
        self.filename = filename
        self.expected = expected
        self.actual = actual


class RenderError(TapgenError):
    """Manifest template rendering failed."""


class ValidatorUnavailableError(TapgenError):
    """The external validator executable could not be started."""


class ValidationFailedError(TapgenError):
    """The external validator rejected a written manifest."""

    def __init__(self, message: str, result: "ValidationResult") -> None:
        super().__init__(message)
        self.result = result


__all__ = [
    "ArchiveError",
    "ChecksumMismatchError",
    "ConfigError",
    "DownloadError",
    "InputError",
    "InvalidRepositoryError",
    "NoBuildSystemError",
    "NoEligibleAssetError",
    "NoReleaseError",
    "RenderError",
    "TapgenError",
    "UnsupportedArchiveError",
    "ValidationFailedError",
    "ValidatorUnavailableError",
]
