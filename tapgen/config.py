"""Configuration loading for tapgen (.tapgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError
from .github.client import DEFAULT_API_URL, DEFAULT_TOKEN_ENV

CONFIG_FILENAME = ".tapgen.yml"


@dataclass
class GitHubConfig:
    """Release metadata provider settings."""

    api_url: str = DEFAULT_API_URL
    token_env: str = DEFAULT_TOKEN_ENV
    request_timeout: Optional[float] = None


@dataclass
class OutputConfig:
    """Where generated manifests are written, relative to the tap root."""

    casks_dir: str = "Casks"
    formula_dir: str = "Formula"


@dataclass
class ValidationConfig:
    """External validator settings."""

    enabled: bool = True
    brew: str = "brew"
    autofix: bool = True


@dataclass
class TapgenConfig:
    """Represents the high-level settings defined in .tapgen.yml."""

    root: Path
    tap: Optional[str] = None
    github: GitHubConfig = field(default_factory=GitHubConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    validation: ValidationConfig = field(default_factory=ValidationConfig)

    @property
    def casks_path(self) -> Path:
        return self.root / self.output.casks_dir

    @property
    def formula_path(self) -> Path:
        return self.root / self.output.formula_dir


def load_config(config_path: Path) -> TapgenConfig:
    """Load configuration from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(Path(config_path))
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TapgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    github = GitHubConfig()
    github_data = _as_dict(data.get("github"))
    if github_data:
        github.api_url = _as_str(github_data.get("api_url")) or github.api_url
        github.token_env = _as_str(github_data.get("token_env")) or github.token_env
        github.request_timeout = _as_float(github_data.get("request_timeout"))

    output = OutputConfig()
    output_data = _as_dict(data.get("output"))
    if output_data:
        output.casks_dir = _as_str(output_data.get("casks_dir")) or output.casks_dir
        output.formula_dir = _as_str(output_data.get("formula_dir")) or output.formula_dir

    validation = ValidationConfig()
    validation_data = _as_dict(data.get("validation"))
    if validation_data:
        validation.brew = _as_str(validation_data.get("brew")) or validation.brew
        enabled = _as_bool(validation_data.get("enabled"))
        if enabled is not None:
            validation.enabled = enabled
        autofix = _as_bool(validation_data.get("autofix"))
        if autofix is not None:
            validation.autofix = autofix

    tap_data = _as_dict(data.get("tap"))
    tap = _as_str(tap_data.get("name")) if tap_data else _as_str(data.get("tap"))

    return TapgenConfig(
        root=root,
        tap=tap,
        github=github,
        output=output,
        validation=validation,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, bool):
        return None
    return str(value) if isinstance(value, (str, int, float)) else None


def _as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


__all__ = [
    "CONFIG_FILENAME",
    "GitHubConfig",
    "OutputConfig",
    "TapgenConfig",
    "ValidationConfig",
    "load_config",
]
