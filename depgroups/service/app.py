"""FastAPI application entrypoint for depgroups service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..planner import PlanResult, Planner
from ..writer import render_config


class PlanRequest(BaseModel):
    path: str
    tier: Optional[str] = None
    max_depth: Optional[int] = None


class FrameworkPayload(BaseModel):
    framework: str
    category: str
    packages: List[str]
    version: Optional[str] = None
    primary: bool = False


class EcosystemPayload(BaseModel):
    manifest: str
    dependencies: int
    primary: Optional[str] = None
    frameworks: List[FrameworkPayload]


class PlanResponse(BaseModel):
    tier: str
    grouped: bool
    ecosystems: Dict[str, EcosystemPayload]
    nested: List[str]
    configuration: Dict[str, Any]
    yaml: str


class HealthResponse(BaseModel):
    status: str


def _default_planner() -> Planner:
    return Planner()


def _to_response(result: PlanResult) -> PlanResponse:
    ecosystems = {
        name: EcosystemPayload(
            manifest=report.manifest,
            dependencies=len(report.dependencies),
            primary=report.primary,
            frameworks=[
                FrameworkPayload(
                    framework=framework.framework,
                    category=framework.category,
                    packages=list(framework.packages),
                    version=framework.version,
                    primary=framework.primary,
                )
                for framework in report.frameworks.values()
            ],
        )
        for name, report in result.reports.items()
    }
    return PlanResponse(
        tier=result.configuration.tier,
        grouped=result.configuration.grouped,
        ecosystems=ecosystems,
        nested=list(result.nested),
        configuration=result.configuration.to_dict(),
        yaml=render_config(result),
    )


def create_app(
    planner_factory: Callable[[], Planner] = _default_planner,
) -> FastAPI:
    """Create the FastAPI application exposing depgroups planning."""

    app = FastAPI(title="depgroups Service", version="1.0.0")

    async def get_planner() -> Planner:
        # Lazy-instantiate per request to keep state predictable.
        return planner_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/plan", response_model=PlanResponse)
    async def plan_project(
        payload: PlanRequest,
        planner: Planner = Depends(get_planner),
    ) -> PlanResponse:
        def _run_plan() -> PlanResult:
            return planner.plan(payload.path, payload.tier, max_depth=payload.max_depth)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_plan)
        return _to_response(result)

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)
