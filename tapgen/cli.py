"""CLI entrypoints for tapgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Callable

from .config import load_config
from .errors import (
    ChecksumMismatchError,
    ConfigError,
    InputError,
    TapgenError,
    ValidationFailedError,
)
from .logging import configure_logging
from .orchestrator import GenerationOutcome, Orchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_generate_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "repo",
        help="GitHub repository (https://github.com/owner/repo or owner/repo).",
    )
    parser.add_argument(
        "--name",
        help="Override the package name (defaults to the repository name).",
    )
    parser.add_argument(
        "--output",
        help="Write the manifest to this path instead of the tap directory.",
    )
    parser.add_argument(
        "--skip-validation",
        action="store_true",
        help="Do not run brew style on the generated file (not recommended).",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tapgen",
        description="Generate Homebrew casks and formulas for Linux from GitHub releases.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--config",
        default=".",
        help="Tap root or path to .tapgen.yml (defaults to current directory).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    cask_parser = subparsers.add_parser(
        "cask",
        help="Generate a cask from the latest release's prebuilt Linux asset.",
    )
    _add_verbose_option(cask_parser, suppress_default=True)
    _add_generate_options(cask_parser)

    formula_parser = subparsers.add_parser(
        "formula",
        help="Generate a formula from a prebuilt binary or from source.",
    )
    _add_verbose_option(formula_parser, suppress_default=True)
    _add_generate_options(formula_parser)
    formula_parser.add_argument(
        "--binary",
        help="Name of the installed executable (defaults to the package name).",
    )
    formula_parser.add_argument(
        "--from-source",
        action="store_true",
        help="Build from the release source tarball even when binaries exist.",
    )

    validate_parser = subparsers.add_parser(
        "validate",
        help="Run brew style and audit on tap manifests.",
    )
    _add_verbose_option(validate_parser, suppress_default=True)
    validate_subparsers = validate_parser.add_subparsers(dest="target", required=True)

    file_parser = validate_subparsers.add_parser("file", help="Validate a single manifest.")
    _add_verbose_option(file_parser, suppress_default=True)
    file_parser.add_argument("path", help="Path to a formula or cask .rb file.")
    file_parser.add_argument(
        "--fix", action="store_true", help="Let brew style rewrite fixable offenses."
    )

    all_parser = validate_subparsers.add_parser(
        "all", help="Validate every manifest under Formula/ and Casks/."
    )
    _add_verbose_option(all_parser, suppress_default=True)
    all_parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Tap root (defaults to the configured root).",
    )
    all_parser.add_argument(
        "--fix", action="store_true", help="Let brew style rewrite fixable offenses."
    )

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for tapgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose))

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config_path=Path(args.config))
        return

    try:
        orchestrator = Orchestrator(config=load_config(Path(args.config)))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "cask":
        outcome = _run_generate(
            parser,
            "cask",
            lambda: orchestrator.generate_cask(
                args.repo,
                name=args.name,
                output=args.output,
                skip_validation=bool(args.skip_validation),
            ),
        )
        _print_next_steps(outcome, orchestrator.config.tap, cask=True)
    elif args.command == "formula":
        outcome = _run_generate(
            parser,
            "formula",
            lambda: orchestrator.generate_formula(
                args.repo,
                name=args.name,
                output=args.output,
                binary=args.binary,
                from_source=bool(args.from_source),
                skip_validation=bool(args.skip_validation),
            ),
        )
        _print_next_steps(outcome, orchestrator.config.tap, cask=False)
    elif args.command == "validate":
        try:
            if args.target == "file":
                results = [orchestrator.validate_file(args.path, fix=bool(args.fix))]
            else:
                results = orchestrator.validate_directory(args.path, fix=bool(args.fix))
        except FileNotFoundError as exc:
            parser.exit(1, f"{exc}\n")
        except TapgenError as exc:
            parser.exit(1, f"tapgen validate failed: {exc}\n")
        failed = [result for result in results if not result.passed]
        for result in results:
            status = "ok" if result.passed else "FAILED"
            print(f"{_relativize(result.path)}: {status}")
            if not result.passed:
                for line in result.diagnostics:
                    print(f"  {line}")
        if failed:
            parser.exit(1, f"{len(failed)} of {len(results)} manifest(s) failed validation\n")
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _run_generate(
    parser: argparse.ArgumentParser,
    kind: str,
    generate: Callable[[], GenerationOutcome],
) -> GenerationOutcome:
    try:
        outcome = generate()
    except InputError as exc:
        parser.exit(1, f"{exc}\n")
    except ChecksumMismatchError as exc:
        parser.exit(1, f"{exc}\nRefusing to write a manifest for unverified content.\n")
    except ValidationFailedError as exc:
        details = "\n".join(f"  {line}" for line in exc.result.diagnostics)
        parser.exit(
            1,
            f"{exc}\n{details}\nFix the issues above or rerun with --skip-validation.\n",
        )
    except TapgenError as exc:
        parser.exit(1, f"tapgen {kind} failed: {exc}\nRun with --verbose for more details.\n")
    print(f"{kind.capitalize()} written to {_relativize(outcome.path)}")
    return outcome


def _print_next_steps(outcome: GenerationOutcome, tap: str | None, *, cask: bool) -> None:
    if not tap:
        return
    flag = "--cask " if cask else ""
    print("Next steps:")
    print(f"  git add {_relativize(outcome.path)} && git commit")
    print(f"  tapgen validate file {_relativize(outcome.path)}")
    print(f"  brew install {flag}{tap}/{outcome.manifest.token}")


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
