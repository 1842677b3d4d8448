"""Adapter around ``brew style`` and ``brew audit`` for generated manifests."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Protocol, Sequence

from .errors import ValidatorUnavailableError
from .logging import get_logger

logger = get_logger("validation")

CASKS_DIR = "Casks"
FORMULA_DIR = "Formula"


class ValidationMode(str, Enum):
    FORMULA = "formula"
    CASK = "cask"


@dataclass
class CommandResult:
    """Exit status and combined output of one validator invocation."""

    returncode: int
    output: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0


CommandRunner = Callable[[Sequence[str]], CommandResult]


@dataclass
class ValidationResult:
    """Structured pass/fail outcome for one manifest file."""

    path: Path
    mode: ValidationMode
    style_passed: bool = True
    audit_passed: bool = True
    audited: bool = False
    fixed: bool = False
    diagnostics: List[str] = field(default_factory=list)
    content: Optional[str] = None

    @property
    def passed(self) -> bool:
        return self.style_passed and self.audit_passed


class Validator(Protocol):
    """Collaborator contract used by the pipeline to check written manifests."""

    def validate(
        self,
        path: Path,
        mode: ValidationMode,
        *,
        autofix: bool = False,
        audit: bool = False,
    ) -> ValidationResult:
        """Check ``path`` and return a structured result."""


def mode_for_path(path: Path | str) -> ValidationMode:
    """Infer cask vs formula from a ``Casks`` directory segment."""
    parts = Path(path).parts
    return ValidationMode.CASK if CASKS_DIR in parts else ValidationMode.FORMULA


def is_placed_in_tap(path: Path, mode: ValidationMode) -> bool:
    """Return True when ``path`` already sits in its tap directory."""
    expected = CASKS_DIR if mode is ValidationMode.CASK else FORMULA_DIR
    return path.parent.name == expected


class BrewValidator:
    """Runs the Homebrew style and audit checks as subprocesses.

    ``brew audit`` only works on a file registered inside a tap, so an audit
    requested for a file outside ``Casks/`` or ``Formula/`` is reported as
    deferred in the diagnostics instead of being run.
    """

    def __init__(self, brew: str = "brew", runner: CommandRunner | None = None) -> None:
        self.brew = brew
        self._runner = runner or self._default_runner

    def validate(
        self,
        path: Path,
        mode: ValidationMode,
        *,
        autofix: bool = False,
        audit: bool = False,
    ) -> ValidationResult:
        path = Path(path)
        result = ValidationResult(path=path, mode=mode)

        style = self._run(self.style_command(path, fix=autofix))
        if autofix:
            result.fixed = style.ok
            # --fix rewrites the file in place.
            result.content = path.read_text(encoding="utf-8") if path.exists() else None
        if not style.ok:
            result.style_passed = False
            result.diagnostics.append(f"style check failed: {style.output.strip() or 'exit ' + str(style.returncode)}")

        if audit:
            if is_placed_in_tap(path, mode):
                audit_run = self._run(self.audit_command(path, mode))
                result.audited = True
                if not audit_run.ok:
                    result.audit_passed = False
                    result.diagnostics.append(
                        f"audit failed: {audit_run.output.strip() or 'exit ' + str(audit_run.returncode)}"
                    )
            else:
                result.diagnostics.append(
                    f"audit deferred: {path} is not inside a tap {CASKS_DIR}/ or {FORMULA_DIR}/ directory"
                )

        if result.content is None and path.exists():
            result.content = path.read_text(encoding="utf-8")
        return result

    def style_command(self, path: Path, *, fix: bool = False) -> List[str]:
        args = [self.brew, "style"]
        if fix:
            args.append("--fix")
        args.append(str(path))
        return args

    def audit_command(self, path: Path, mode: ValidationMode) -> List[str]:
        args = [self.brew, "audit", "--strict", "--online"]
        if mode is ValidationMode.CASK:
            args.append("--cask")
        args.append(str(path))
        return args

    def _run(self, args: Sequence[str]) -> CommandResult:
        logger.debug("Running %s", " ".join(args))
        return self._runner(args)

    @staticmethod
    def _default_runner(args: Sequence[str]) -> CommandResult:
        try:
            completed = subprocess.run(
                list(args),
                check=False,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise ValidatorUnavailableError(
                f"Unable to locate '{args[0]}'. Install Homebrew or run with --skip-validation."
            ) from exc
        output = "\n".join(part for part in (completed.stdout, completed.stderr) if part)
        return CommandResult(returncode=completed.returncode, output=output)


def manifest_files(root: Path) -> Iterable[tuple[Path, ValidationMode]]:
    """Yield every ``Formula/*.rb`` and ``Casks/*.rb`` file below ``root``."""
    for directory, mode in ((FORMULA_DIR, ValidationMode.FORMULA), (CASKS_DIR, ValidationMode.CASK)):
        folder = root / directory
        if not folder.is_dir():
            continue
        for path in sorted(folder.glob("*.rb")):
            yield path, mode


__all__ = [
    "BrewValidator",
    "CommandResult",
    "ValidationMode",
    "ValidationResult",
    "Validator",
    "is_placed_in_tap",
    "manifest_files",
    "mode_for_path",
]
