"""FastAPI application entrypoint for readyscan service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .. import __version__
from ..config import ConfigError, load_config
from ..engine import ReadinessEngine
from ..errors import LocatorInvalid, SourceUnavailable
from ..models import Report


class AnalyzeRequest(BaseModel):
    target: str
    token: Optional[str] = None


class ReportResponse(BaseModel):
    project: Dict[str, Any]
    verdict: str
    architecture: str
    offlineStatus: str
    offlineReason: str
    evidence: List[Dict[str, Any]]
    offlineSignals: List[Dict[str, Any]]
    limitations: List[str]


class HealthResponse(BaseModel):
    status: str
    version: str


def _default_engine() -> ReadinessEngine:
    return ReadinessEngine(load_config())


def create_app(
    engine_factory: Callable[[], ReadinessEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing readiness analysis."""

    app = FastAPI(title="readyscan", version=__version__)

    async def get_engine() -> ReadinessEngine:
        # One engine per request; runs share no state.
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @app.post("/analyze", response_model=ReportResponse)
    async def analyze(
        payload: AnalyzeRequest,
        engine: ReadinessEngine = Depends(get_engine),
    ) -> ReportResponse:
        if payload.token:
            engine.config.remote.token = payload.token

        def _run() -> Report:
            return engine.analyze_target(payload.target)

        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, _run)
        return ReportResponse(**report.to_dict())

    @app.exception_handler(LocatorInvalid)
    async def locator_invalid_handler(_: Any, exc: LocatorInvalid) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(SourceUnavailable)
    async def source_unavailable_handler(_: Any, exc: SourceUnavailable) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_error_handler(_: Any, exc: ConfigError) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
