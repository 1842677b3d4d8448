"""Build system detection for source-built formulas.

Each supported toolchain is a fixed :class:`BuildStrategy` record. Detection
walks :data:`DETECTION_ORDER` and returns the first strategy whose trigger
files are present, so language toolchains (Go, Rust) win over a fallback
``Makefile`` in hybrid repositories.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import NoBuildSystemError
from .naming import ruby_escape, ruby_string


class BuildSystem(str, Enum):
    GO = "Go"
    RUST = "Rust"
    MESON = "Meson"
    CMAKE = "CMake"
    MAKEFILE = "Makefile"


class TriggerRule(str, Enum):
    ANY = "any"
    ALL = "all"


@dataclass(frozen=True)
class BuildStrategy:
    """Install/test/dependency recipe for one build system."""

    kind: BuildSystem
    triggers: Tuple[str, ...]
    rule: TriggerRule
    install_steps: Tuple[str, ...]
    build_dependencies: Tuple[str, ...] = ()

    @property
    def name(self) -> str:
        return self.kind.value

    def matches(self, files: Sequence[str]) -> bool:
        present = [_contains_file(files, trigger) for trigger in self.triggers]
        if self.rule is TriggerRule.ALL:
            return all(present)
        return any(present)

    def install_procedure(self, name: str) -> str:
        """Return the Ruby ``install`` method; ``name`` fills ``{name}`` placeholders."""
        lines = ["def install"]
        lines.extend("  " + step.replace("{name}", ruby_escape(name)) for step in self.install_steps)
        lines.append("end")
        return "\n".join(lines)

    def test_procedure(self, binary_name: str) -> str:
        return version_test_procedure(binary_name)

    def dependencies(self) -> List[str]:
        return list(self.build_dependencies)


GO = BuildStrategy(
    kind=BuildSystem.GO,
    triggers=("go.mod", "go.sum"),
    rule=TriggerRule.ANY,
    install_steps=('system "go", "build", *std_go_args(ldflags: "-s -w", output: bin/"{name}")',),
    build_dependencies=("go",),
)

RUST = BuildStrategy(
    kind=BuildSystem.RUST,
    triggers=("Cargo.toml", "Cargo.lock"),
    rule=TriggerRule.ALL,
    install_steps=('system "cargo", "install", *std_cargo_args',),
    build_dependencies=("rust",),
)

MESON = BuildStrategy(
    kind=BuildSystem.MESON,
    triggers=("meson.build",),
    rule=TriggerRule.ANY,
    install_steps=(
        'system "meson", "setup", "build", *std_meson_args',
        'system "meson", "compile", "-C", "build", "--verbose"',
        'system "meson", "install", "-C", "build"',
    ),
    build_dependencies=("meson", "ninja"),
)

CMAKE = BuildStrategy(
    kind=BuildSystem.CMAKE,
    triggers=("CMakeLists.txt",),
    rule=TriggerRule.ANY,
    install_steps=(
        'system "cmake", "-S", ".", "-B", "build", *std_cmake_args',
        'system "cmake", "--build", "build"',
        'system "cmake", "--install", "build"',
    ),
    build_dependencies=("cmake",),
)

MAKEFILE = BuildStrategy(
    kind=BuildSystem.MAKEFILE,
    triggers=("Makefile", "makefile", "GNUmakefile"),
    rule=TriggerRule.ANY,
    install_steps=('system "make", "install", "PREFIX=#{prefix}"',),
)

DETECTION_ORDER: Tuple[BuildStrategy, ...] = (GO, RUST, MESON, CMAKE, MAKEFILE)


def find(files: Iterable[str]) -> Optional[BuildStrategy]:
    """Return the first matching strategy, or ``None``."""
    listing = list(files)
    for strategy in DETECTION_ORDER:
        if strategy.matches(listing):
            return strategy
    return None


def detect(files: Iterable[str]) -> BuildStrategy:
    strategy = find(files)
    if strategy is None:
        raise NoBuildSystemError("Could not detect build system from repository files")
    return strategy


def version_test_procedure(binary_name: str) -> str:
    return f'test do\n  system "#{{bin}}/{ruby_escape(binary_name)}", "--version"\nend'


def binary_install_procedure(binary_name: str, source_path: str = "") -> str:
    """Install procedure for a prebuilt binary shipped in the downloaded archive."""
    if source_path and posixpath.basename(source_path) != binary_name:
        return f"def install\n  bin.install {ruby_string(source_path)} => {ruby_string(binary_name)}\nend"
    return f"def install\n  bin.install {ruby_string(source_path or binary_name)}\nend"


def _contains_file(files: Sequence[str], target: str) -> bool:
    return any(path.endswith(target) for path in files)


__all__ = [
    "BuildStrategy",
    "BuildSystem",
    "CMAKE",
    "DETECTION_ORDER",
    "GO",
    "MAKEFILE",
    "MESON",
    "RUST",
    "TriggerRule",
    "binary_install_procedure",
    "detect",
    "find",
    "version_test_procedure",
]
