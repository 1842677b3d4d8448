"""Pipeline orchestration for cask/formula generation and validation."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from . import checksum
from .archive import inspect, inspect_archive
from .assets import classify, select_best
from .config import TapgenConfig, load_config
from .errors import ArchiveError, NoEligibleAssetError, NoReleaseError, ValidationFailedError
from .github.client import GitHubClient, parse_repo_url
from .homebrew.cask import cleanup_paths_for, desktop_integration, render_cask
from .homebrew.document import ManifestRenderer
from .homebrew.formula import new_binary_formula, new_source_formula_from_files, render_formula
from .logging import get_logger
from .models import (
    ArchiveReport,
    ChecksumReport,
    ClassifiedAsset,
    ManifestData,
    PackageFormat,
    Release,
    Repository,
)
from .naming import ensure_linux_suffix, normalize_package_name
from .validation import BrewValidator, ValidationMode, ValidationResult, Validator, manifest_files, mode_for_path

Fetcher = Callable[[str], bytes]


@dataclass
class GenerationOutcome:
    """Result of writing one manifest to disk."""

    path: Path
    mode: ValidationMode
    content: str
    manifest: ManifestData
    checksum: ChecksumReport
    asset: Optional[ClassifiedAsset] = None
    validation: Optional[ValidationResult] = None


class Orchestrator:
    """Coordinates fetch, verify, introspect, synthesize and validate steps."""

    def __init__(
        self,
        config: TapgenConfig | None = None,
        client: GitHubClient | None = None,
        fetch: Fetcher | None = None,
        validator: Validator | None = None,
        renderer: ManifestRenderer | None = None,
    ) -> None:
        self.config = config or load_config(Path.cwd())
        self.client = client or GitHubClient(
            api_url=self.config.github.api_url,
            token_env=self.config.github.token_env,
            request_timeout=self.config.github.request_timeout,
        )
        self._fetch = fetch or self._default_fetch
        self.validator = validator or BrewValidator(brew=self.config.validation.brew)
        self.renderer = renderer or ManifestRenderer()
        self.logger = get_logger("orchestrator")

    # ------------------------------------------------------------------
    # Casks

    def generate_cask(
        self,
        repo_url: str,
        *,
        name: str | None = None,
        output: Path | str | None = None,
        skip_validation: bool = False,
    ) -> GenerationOutcome:
        """Generate a cask for the latest release of ``repo_url``."""
        owner, repo = parse_repo_url(repo_url)
        self.logger.info("Repository: %s/%s", owner, repo)
        repository, release = self._fetch_metadata(owner, repo)

        asset = self._select_asset(release)
        data = self._download(asset.download_url)
        report = checksum.verify_against_upstream(
            data, asset.name, asset.download_url, fetch=self._fetch
        )
        self.logger.info("SHA256: %s", report.digest)

        package_name = normalize_package_name(name or repo)
        token = ensure_linux_suffix(package_name)
        archive = self._inspect(data, asset, package_name)
        binary_path, binary_name = self._cask_binary(asset, archive, package_name)

        if archive.desktop_entry is None:
            self.logger.info("No desktop file found")
        else:
            self.logger.info("Found desktop file: %s", archive.desktop_entry.path)
        if archive.icon is None:
            self.logger.info("No icon found")
        else:
            self.logger.info("Found icon: %s (size: %s)", archive.icon.path, archive.icon.size_token)

        manifest = ManifestData(
            token=token,
            version=release.version,
            sha256=report.digest,
            url=asset.download_url,
            description=repository.description,
            homepage=repository.homepage,
            license=repository.license,
            app_name=repo,
            source_url=repository.url,
            binary_path=binary_path,
            binary_name=binary_name,
            desktop=desktop_integration(archive.desktop_entry, archive.icon),
            cleanup_paths=cleanup_paths_for(repo),
        )
        content = render_cask(manifest, self.renderer)
        path = Path(output) if output else self.config.casks_path / f"{token}.rb"
        return self._write_and_validate(
            path,
            content,
            ValidationMode.CASK,
            manifest,
            report,
            asset,
            skip_validation=skip_validation,
        )

    # ------------------------------------------------------------------
    # Formulas

    def generate_formula(
        self,
        repo_url: str,
        *,
        name: str | None = None,
        output: Path | str | None = None,
        binary: str | None = None,
        from_source: bool = False,
        skip_validation: bool = False,
    ) -> GenerationOutcome:
        """Generate a formula from a prebuilt asset or, failing that, from source."""
        owner, repo = parse_repo_url(repo_url)
        package_name = normalize_package_name(name or repo)
        binary_name = binary or package_name
        self.logger.info("Repository: %s/%s (package %s)", owner, repo, package_name)
        repository, release = self._fetch_metadata(owner, repo)

        asset: Optional[ClassifiedAsset] = None
        if not from_source:
            try:
                asset = self._select_asset(release)
            except NoEligibleAssetError:
                self.logger.warning("No Linux binaries found in release; falling back to source tarball")
                from_source = True

        if from_source or asset is None:
            url = source_tarball_url(owner, repo, release.tag_name)
            data = self._download(url)
            report = ChecksumReport(digest=checksum.sha256_hex(data), verified=False)
            manifest = new_source_formula_from_files(
                package_name,
                release.version,
                report.digest,
                url,
                repository,
                self.client.get_repo_files(owner, repo),
                binary_name,
            )
            self.logger.info("Detected build system: %s", manifest.build_system)
        else:
            data = self._download(asset.download_url)
            report = checksum.verify_against_upstream(
                data, asset.name, asset.download_url, fetch=self._fetch
            )
            archive = self._inspect(data, asset, binary_name)
            manifest = new_binary_formula(
                package_name,
                release.version,
                report.digest,
                asset.download_url,
                repository,
                binary_name,
                staged_binary_path(archive),
            )
        self.logger.info("SHA256: %s", report.digest)

        content = render_formula(manifest, self.renderer)
        path = Path(output) if output else self.config.formula_path / f"{package_name}.rb"
        return self._write_and_validate(
            path,
            content,
            ValidationMode.FORMULA,
            manifest,
            report,
            asset,
            skip_validation=skip_validation,
        )

    # ------------------------------------------------------------------
    # Validation

    def validate_file(
        self,
        path: Path | str,
        *,
        fix: bool = False,
        audit: bool = True,
        mode: ValidationMode | None = None,
    ) -> ValidationResult:
        target = Path(path)
        if not target.is_file():
            raise FileNotFoundError(f"Manifest not found: {target}")
        effective_mode = mode or mode_for_path(target)
        self.logger.info("Validating %s", target.stem)
        result = self.validator.validate(target, effective_mode, autofix=fix, audit=audit)
        for line in result.diagnostics:
            self.logger.info("  %s", line)
        return result

    def validate_directory(
        self, root: Path | str | None = None, *, fix: bool = False, audit: bool = True
    ) -> List[ValidationResult]:
        """Validate every formula and cask in the tap at ``root``."""
        base = Path(root) if root is not None else self.config.root
        results: List[ValidationResult] = []
        for path, mode in manifest_files(base):
            results.append(self.validate_file(path, fix=fix, audit=audit, mode=mode))
        if not results:
            self.logger.info("No formulas or casks to validate under %s", base)
        return results

    # ------------------------------------------------------------------
    # Helpers

    def _fetch_metadata(self, owner: str, repo: str) -> Tuple[Repository, Release]:
        repository = self.client.get_repository(owner, repo)
        self.logger.info("Found: %s", repository.description or "(no description)")
        release = self.client.get_latest_release(owner, repo)
        if not release.tag_name:
            raise NoReleaseError(f"No published releases found for {owner}/{repo}")
        self.logger.info("Version: %s", release.version)
        return repository, release

    def _select_asset(self, release: Release) -> ClassifiedAsset:
        classified = [classify(asset) for asset in release.assets]
        asset = select_best(classified)
        self.logger.info(
            "Selected: %s (%s, priority %d)",
            asset.name,
            asset.package_format.value,
            asset.priority_class,
        )
        return asset

    def _download(self, url: str) -> bytes:
        self.logger.info("Downloading %s", url)
        data = self._fetch(url)
        self.logger.info("Downloaded %.2f MB", len(data) / (1024 * 1024))
        return data

    def _inspect(self, data: bytes, asset: ClassifiedAsset, package_name: str) -> ArchiveReport:
        if not asset.package_format.is_tarball:
            return inspect([], package_name)
        try:
            report = inspect_archive(data, asset.name, package_name)
        except ArchiveError as exc:
            self.logger.info("Could not list archive contents: %s; using default paths", exc)
            return inspect([], package_name)
        self.logger.info("Found %d files in archive", len(report.members))
        return report

    def _cask_binary(
        self, asset: ClassifiedAsset, archive: ArchiveReport, package_name: str
    ) -> Tuple[str, str]:
        if asset.package_format is PackageFormat.APPIMAGE:
            return asset.name, package_name
        if archive.best_binary:
            binary_name = posixpath.basename(archive.best_binary)
            lowered_binary = binary_name.lower()
            lowered_package = package_name.lower()
            if lowered_package in lowered_binary or lowered_binary in lowered_package:
                binary_name = package_name
            self.logger.info("Binary: %s -> %s", archive.best_binary, binary_name)
            return archive.best_binary, binary_name
        guessed = f"{archive.root_directory}{package_name}"
        self.logger.info("Binary (guessed): %s -> %s", guessed, package_name)
        return guessed, package_name

    def _write_and_validate(
        self,
        path: Path,
        content: str,
        mode: ValidationMode,
        manifest: ManifestData,
        report: ChecksumReport,
        asset: Optional[ClassifiedAsset],
        *,
        skip_validation: bool,
    ) -> GenerationOutcome:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        self.logger.info("Created: %s", path)

        outcome = GenerationOutcome(
            path=path,
            mode=mode,
            content=content,
            manifest=manifest,
            checksum=report,
            asset=asset,
        )
        if skip_validation or not self.config.validation.enabled:
            self.logger.info("Skipping validation")
            return outcome

        # brew audit needs the file registered in a tap; only style runs here.
        self.logger.info("Audit deferred until %s is committed to the tap", path.name)
        result = self.validator.validate(
            path, mode, autofix=self.config.validation.autofix, audit=False
        )
        outcome.validation = result
        if result.content is not None:
            outcome.content = result.content
        if not result.passed:
            raise ValidationFailedError(f"Generated {mode.value} failed validation: {path}", result)
        if result.fixed:
            self.logger.info("Validation passed (style issues auto-fixed)")
        else:
            self.logger.info("Validation passed")
        return outcome

    @staticmethod
    def _default_fetch(url: str) -> bytes:
        return checksum.download(url)


def source_tarball_url(owner: str, repo: str, tag: str) -> str:
    return f"https://github.com/{owner}/{repo}/archive/refs/tags/{tag}.tar.gz"


def staged_binary_path(archive: ArchiveReport) -> str:
    """Return the best binary relative to Homebrew's staging directory.

    Homebrew strips a single top-level directory when it unpacks a tarball.
    """
    if not archive.best_binary:
        return ""
    path = archive.best_binary
    if archive.root_directory and path.startswith(archive.root_directory):
        path = path[len(archive.root_directory):]
    return path


__all__ = ["GenerationOutcome", "Orchestrator", "source_tarball_url", "staged_binary_path"]
