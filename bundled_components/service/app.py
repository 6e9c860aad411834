"""FastAPI application exposing component discovery and checks."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List, Optional

try:  # pragma: no cover - optional dependency
    from fastapi import FastAPI
    from fastapi.responses import JSONResponse
    from pydantic import BaseModel

    _FASTAPI_AVAILABLE = True
except ModuleNotFoundError:  # pragma: no cover - service mode optional
    FastAPI = None  # type: ignore[assignment]
    JSONResponse = None  # type: ignore[assignment]
    BaseModel = object  # type: ignore[assignment]
    _FASTAPI_AVAILABLE = False

from ..config import ConfigError, load_config
from ..discovery import DuplicateComponentError, create_component_map
from ..plugin import BuildContext, BundledComponentsPlugin
from ..validators import ValidationError


class ProjectRequest(BaseModel):
    path: str
    input: str = "src"


class ComponentModel(BaseModel):
    name: str
    kind: str
    type: Optional[str] = None
    styles: List[str] = []
    scripts: List[str] = []
    requires: List[str] = []
    has_validation: bool = False


class ComponentsResponse(BaseModel):
    components: List[ComponentModel]


class SectionDiagnosticModel(BaseModel):
    message: str
    section_type: str
    section_index: int
    file_name: Optional[str] = None


class CheckResponse(BaseModel):
    status: str
    used: List[str] = []
    needed: List[str] = []
    requirement_errors: List[str] = []
    section_diagnostics: List[SectionDiagnosticModel] = []


class HealthResponse(BaseModel):
    status: str


def _default_plugin_factory(path: str) -> BundledComponentsPlugin:
    project_root = Path(path).expanduser().resolve()
    if not project_root.is_dir():
        raise FileNotFoundError(f"Project path not found: {path}")
    return BundledComponentsPlugin(load_config(project_root), project_root=project_root)


def create_app(
    plugin_factory: Callable[[str], BundledComponentsPlugin] = _default_plugin_factory,
) -> FastAPI:
    """Create the FastAPI application exposing bundled-components operations."""

    if not _FASTAPI_AVAILABLE:  # pragma: no cover - validated via unit tests
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    app = FastAPI(title="Bundled Components Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/components", response_model=ComponentsResponse)
    async def list_components(payload: ProjectRequest) -> ComponentsResponse:
        plugin = plugin_factory(payload.path)
        loop = asyncio.get_running_loop()
        partials, sections = await loop.run_in_executor(None, plugin.discover)
        create_component_map([*partials, *sections])
        models = [
            ComponentModel(
                name=component.name,
                kind=kind,
                type=component.type,
                styles=list(component.styles),
                scripts=list(component.scripts),
                requires=component.requirements,
                has_validation=component.validation is not None,
            )
            for kind, components in (("partial", partials), ("section", sections))
            for component in components
        ]
        return ComponentsResponse(components=models)

    @app.post("/check", response_model=CheckResponse)
    async def check(payload: ProjectRequest) -> CheckResponse:
        plugin = plugin_factory(payload.path)
        loop = asyncio.get_running_loop()
        context: BuildContext | None = await loop.run_in_executor(
            None, plugin.before_build, payload.input
        )
        if context is None:
            return CheckResponse(status="skipped")

        diagnostics = [
            SectionDiagnosticModel(
                message=item.message,
                section_type=item.section_type,
                section_index=item.section_index,
                file_name=item.file_name,
            )
            for item in context.section_diagnostics
        ]
        has_problems = bool(context.requirement_errors or diagnostics)
        return CheckResponse(
            status="invalid" if has_problems else "ok",
            used=sorted(context.used),
            needed=sorted(context.needed),
            requirement_errors=list(context.requirement_errors),
            section_diagnostics=diagnostics,
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigError)
    async def config_handler(_: Any, exc: ConfigError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(DuplicateComponentError)
    async def duplicate_handler(_: Any, exc: DuplicateComponentError) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(ValidationError)
    async def validation_handler(_: Any, exc: ValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc), "issues": [str(issue) for issue in exc.issues]},
        )

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    if not _FASTAPI_AVAILABLE:
        raise RuntimeError(
            "FastAPI is required for service mode. Install it with `pip install fastapi uvicorn`."
        )

    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app()
    uvicorn.run(app, host=host, port=port)
