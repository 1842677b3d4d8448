"""Tests for tapgen.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from tapgen.config import GitHubConfig, OutputConfig, TapgenConfig, ValidationConfig, load_config
from tapgen.errors import ConfigError


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TapgenConfig)
    assert config.root == tmp_path.resolve()
    assert config.tap is None
    assert config.github == GitHubConfig()
    assert config.output == OutputConfig()
    assert config.validation == ValidationConfig()
    assert config.casks_path == tmp_path.resolve() / "Casks"
    assert config.formula_path == tmp_path.resolve() / "Formula"


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".tapgen.yml"
    config_file.write_text(
        """
tap:
  name: "acme/homebrew-linux"
github:
  api_url: "https://ghe.example.com/api/v3"
  token_env: "GHE_TOKEN"
  request_timeout: 30
output:
  casks_dir: "casks"
  formula_dir: "formulae"
validation:
  enabled: false
  brew: "/home/linuxbrew/.linuxbrew/bin/brew"
  autofix: "no"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.tap == "acme/homebrew-linux"
    assert config.github.api_url == "https://ghe.example.com/api/v3"
    assert config.github.token_env == "GHE_TOKEN"
    assert config.github.request_timeout == 30.0
    assert config.casks_path == tmp_path.resolve() / "casks"
    assert config.formula_path == tmp_path.resolve() / "formulae"
    assert config.validation.enabled is False
    assert config.validation.brew == "/home/linuxbrew/.linuxbrew/bin/brew"
    assert config.validation.autofix is False


def test_tap_may_be_a_plain_string(tmp_path: Path) -> None:
    (tmp_path / ".tapgen.yml").write_text("tap: acme/homebrew-tools\n", encoding="utf-8")

    assert load_config(tmp_path).tap == "acme/homebrew-tools"


def test_empty_config_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / ".tapgen.yml").write_text("\n", encoding="utf-8")

    config = load_config(tmp_path)

    assert config.validation.enabled is True
    assert config.output.casks_dir == "Casks"


def test_invalid_yaml_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".tapgen.yml").write_text("github: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(tmp_path)


def test_non_mapping_root_raises_config_error(tmp_path: Path) -> None:
    (tmp_path / ".tapgen.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_config(tmp_path)


def test_other_filename_resolves_to_sibling_config(tmp_path: Path) -> None:
    (tmp_path / ".tapgen.yml").write_text("tap: acme/tap\n", encoding="utf-8")

    config = load_config(tmp_path / "Casks")

    assert config.tap == "acme/tap"
