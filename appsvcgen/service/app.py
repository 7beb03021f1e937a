"""FastAPI application entrypoint for appsvcgen service mode."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AppSvcGenConfig, load_config
from ..converter import Converter
from ..models import ConversionResult


class OutputPathError(RuntimeError):
    """Raised when a request targets an app folder outside the service output root."""


class ConvertRequest(BaseModel):
    source_dir: str
    app_dir: Optional[str] = None
    app_name: Optional[str] = None
    cluster_name: Optional[str] = None
    config_path: str = "."


class ConvertResponse(BaseModel):
    app_dir: str
    files_scanned: int
    handlers_found: int
    functions_emitted: int
    endpoints_emitted: int
    artifacts: List[str]


class HealthResponse(BaseModel):
    status: str


def _default_converter() -> Converter:
    return Converter()


def confine_app_dir(app_dir: Path, output_root: Path) -> Path:
    """Return ``app_dir`` resolved, or raise when it is not strictly below ``output_root``.

    Conversion replaces the app folder wholesale, so remote callers may only
    name folders the service was started to write into.
    """
    root = output_root.expanduser().resolve()
    resolved = (root / app_dir.expanduser()).resolve()
    if root not in resolved.parents:
        raise OutputPathError(f"app_dir must be a folder inside {root}: {app_dir}")
    return resolved


def _build_config(payload: ConvertRequest, output_root: Path) -> AppSvcGenConfig:
    config = load_config(Path(payload.config_path)).with_overrides(
        source_dir=payload.source_dir,
        app_name=payload.app_name,
        cluster_name=payload.cluster_name,
    )
    requested = Path(payload.app_dir) if payload.app_dir else config.resolved_app_dir
    # Requests never copy a template.
    config.template_dir = None
    return config.with_overrides(app_dir=confine_app_dir(requested, output_root))


def create_app(
    converter_factory: Callable[[], Converter] = _default_converter,
    *,
    output_root: Path | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing the conversion pipeline.

    ``output_root`` (default: the working directory) bounds where ``/convert``
    may write app folders.
    """

    app = FastAPI(title="appsvcgen Service", version="1.0.0")
    root = (output_root or Path.cwd()).resolve()

    async def get_converter() -> Converter:
        return converter_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/convert", response_model=ConvertResponse)
    async def convert(
        payload: ConvertRequest,
        converter: Converter = Depends(get_converter),
    ) -> ConvertResponse:
        def _run() -> ConversionResult:
            return converter.run(_build_config(payload, root))

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return ConvertResponse(
            app_dir=str(result.app_dir),
            files_scanned=result.files_scanned,
            handlers_found=result.handlers_found,
            functions_emitted=result.functions_emitted,
            endpoints_emitted=result.endpoints_emitted,
            artifacts=[str(path) for path in result.artifacts],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000, output_root: Path | None = None
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(output_root=output_root), host=host, port=port)
