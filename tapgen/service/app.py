"""FastAPI application entrypoint for tapgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import load_config
from ..errors import (
    ChecksumMismatchError,
    DownloadError,
    InputError,
    TapgenError,
    ValidationFailedError,
)
from ..orchestrator import GenerationOutcome, Orchestrator
from ..validation import ValidationResult

T = TypeVar("T")


class CaskRequest(BaseModel):
    repo: str
    name: Optional[str] = None
    output: Optional[str] = None
    skip_validation: bool = False


class FormulaRequest(BaseModel):
    repo: str
    name: Optional[str] = None
    output: Optional[str] = None
    binary: Optional[str] = None
    from_source: bool = False
    skip_validation: bool = False


class GenerationResponse(BaseModel):
    path: str
    kind: str
    version: str
    sha256: str
    checksum_verified: bool
    asset: Optional[str] = None
    validated: bool = False
    content: str


class ValidateRequest(BaseModel):
    path: str
    fix: bool = False
    all: bool = False


class ValidationReport(BaseModel):
    path: str
    kind: str
    passed: bool
    audited: bool
    fixed: bool
    diagnostics: List[str] = []


class ValidateResponse(BaseModel):
    passed: bool
    results: List[ValidationReport]


class HealthResponse(BaseModel):
    status: str


def _default_orchestrator() -> Orchestrator:
    return Orchestrator()


def create_app(
    orchestrator_factory: Callable[[], Orchestrator] = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing tapgen operations."""

    app = FastAPI(title="tapgen Service", version="1.0.0")

    async def get_orchestrator() -> Orchestrator:
        return orchestrator_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/cask", response_model=GenerationResponse)
    async def generate_cask(
        payload: CaskRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerationResponse:
        outcome = await _in_executor(
            lambda: orchestrator.generate_cask(
                payload.repo,
                name=payload.name,
                output=payload.output,
                skip_validation=payload.skip_validation,
            )
        )
        return _generation_response(outcome)

    @app.post("/formula", response_model=GenerationResponse)
    async def generate_formula(
        payload: FormulaRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> GenerationResponse:
        outcome = await _in_executor(
            lambda: orchestrator.generate_formula(
                payload.repo,
                name=payload.name,
                output=payload.output,
                binary=payload.binary,
                from_source=payload.from_source,
                skip_validation=payload.skip_validation,
            )
        )
        return _generation_response(outcome)

    @app.post("/validate", response_model=ValidateResponse)
    async def validate(
        payload: ValidateRequest,
        orchestrator: Orchestrator = Depends(get_orchestrator),
    ) -> ValidateResponse:
        def _run() -> List[ValidationResult]:
            if payload.all:
                return orchestrator.validate_directory(payload.path, fix=payload.fix)
            return [orchestrator.validate_file(payload.path, fix=payload.fix)]

        results = await _in_executor(_run)
        reports = [_validation_report(result) for result in results]
        return ValidateResponse(
            passed=all(report.passed for report in reports),
            results=reports,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(InputError)
    async def input_error_handler(_: Any, exc: InputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ChecksumMismatchError)
    async def checksum_error_handler(_: Any, exc: ChecksumMismatchError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "expected": exc.expected,
                "actual": exc.actual,
            },
        )

    @app.exception_handler(ValidationFailedError)
    async def validation_failed_handler(_: Any, exc: ValidationFailedError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={
                "detail": str(exc),
                "path": str(exc.result.path),
                "diagnostics": list(exc.result.diagnostics),
            },
        )

    @app.exception_handler(DownloadError)
    async def download_error_handler(_: Any, exc: DownloadError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc), "url": exc.url})

    @app.exception_handler(TapgenError)
    async def tapgen_error_handler(_: Any, exc: TapgenError) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


async def _in_executor(func: Callable[[], T]) -> T:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, func)


def _generation_response(outcome: GenerationOutcome) -> GenerationResponse:
    return GenerationResponse(
        path=str(outcome.path),
        kind=outcome.mode.value,
        version=outcome.manifest.version,
        sha256=outcome.checksum.digest,
        checksum_verified=outcome.checksum.verified,
        asset=outcome.asset.name if outcome.asset is not None else None,
        validated=outcome.validation is not None,
        content=outcome.content,
    )


def _validation_report(result: ValidationResult) -> ValidationReport:
    return ValidationReport(
        path=str(result.path),
        kind=result.mode.value,
        passed=result.passed,
        audited=result.audited,
        fixed=result.fixed,
        diagnostics=list(result.diagnostics),
    )


def run_service(
    host: str = "127.0.0.1", port: int = 8000, config_path: Path | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    config = load_config(config_path or Path.cwd())
    app = create_app(lambda: Orchestrator(config=config))
    uvicorn.run(app, host=host, port=port)
