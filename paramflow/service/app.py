"""FastAPI application exposing parameter recomputation and hydration."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..engine import EngineResult, HydrationResult, ParameterEngine
from ..errors import LoadError
from ..models import RequestShape, parse_configured_variables
from ..substitution import render_template, split_template, unresolved_parameters


class VariableModel(BaseModel):
    name: str
    value: str = ""


class RecomputeRequest(BaseModel):
    url: Optional[str] = None
    request: Optional[Dict[str, Any]] = None
    templates: Optional[Dict[str, Any]] = None
    configured: List[Union[str, Dict[str, Any]]] = Field(default_factory=list)


class HydrateRequest(BaseModel):
    entity_id: Optional[str] = None
    entity: Optional[Dict[str, Any]] = None
    variables: Optional[List[Union[str, Dict[str, Any]]]] = None


class RenderRequest(BaseModel):
    template: Optional[str] = None
    values: Dict[str, Any] = Field(default_factory=dict)


class CompletionModel(BaseModel):
    total: int
    configured: int
    rate: int
    is_complete: bool


class RecomputeResponse(BaseModel):
    parameters: List[str]
    configured: List[str]
    pending: List[str]
    state: str
    completion: CompletionModel


class HydrateResponse(RecomputeResponse):
    dropped: List[str]
    variables: List[VariableModel]


class SegmentModel(BaseModel):
    text: str
    parameter: Optional[str] = None


class RenderResponse(BaseModel):
    rendered: str
    unresolved: List[str]
    segments: List[SegmentModel]


class HealthResponse(BaseModel):
    status: str


def _default_engine() -> ParameterEngine:
    return ParameterEngine()


def create_app(
    engine_factory: Callable[[], ParameterEngine] = _default_engine,
) -> FastAPI:
    """Create the FastAPI application exposing paramflow operations."""

    app = FastAPI(title="Paramflow Service", version="1.0.0")

    async def get_engine() -> ParameterEngine:
        return engine_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/recompute", response_model=RecomputeResponse)
    async def recompute(
        payload: RecomputeRequest,
        engine: ParameterEngine = Depends(get_engine),
    ) -> RecomputeResponse:
        request = RequestShape.from_payload(payload.request) if payload.request else None
        result = engine.recompute(
            payload.url,
            request,
            payload.templates,
            parse_configured_variables(payload.configured),
        )
        return RecomputeResponse(**_result_fields(result))

    @app.post("/hydrate", response_model=HydrateResponse)
    async def hydrate(
        payload: HydrateRequest,
        engine: ParameterEngine = Depends(get_engine),
    ) -> HydrateResponse:
        persisted = (
            parse_configured_variables(payload.variables)
            if payload.variables is not None
            else None
        )
        if payload.entity is not None:
            result = engine.hydrate(payload.entity, persisted)
        elif payload.entity_id:
            entity_id = payload.entity_id

            def _run_load() -> HydrationResult:
                _, loaded = engine.load_for_edit(entity_id, persisted)
                return loaded

            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(None, _run_load)
        else:
            raise HTTPException(
                status_code=422, detail="Provide either 'entity' or 'entity_id'"
            )
        return HydrateResponse(
            **_result_fields(result),
            dropped=list(result.dropped),
            variables=[VariableModel(name=v.name, value=v.value) for v in result.variables],
        )

    @app.post("/render", response_model=RenderResponse)
    async def render(payload: RenderRequest) -> RenderResponse:
        return RenderResponse(
            rendered=render_template(payload.template, payload.values),
            unresolved=unresolved_parameters(payload.template, payload.values),
            segments=[
                SegmentModel(text=segment.text, parameter=segment.parameter)
                for segment in split_template(payload.template)
            ],
        )

    @app.exception_handler(LoadError)
    async def load_error_handler(_: Any, exc: LoadError) -> JSONResponse:
        return JSONResponse(
            status_code=503,
            content={
                "detail": str(exc),
                "resource": exc.resource,
                "retryable": exc.retryable,
            },
        )

    return app


def _result_fields(result: EngineResult) -> Dict[str, Any]:
    return {
        "parameters": list(result.parameters),
        "configured": list(result.configured),
        "pending": list(result.pending),
        "state": result.state.value,
        "completion": CompletionModel(
            total=result.completion.total,
            configured=result.completion.configured,
            rate=result.completion.rate,
            is_complete=result.completion.is_complete,
        ),
    }


def run_service(
    host: str = "0.0.0.0",
    port: int = 8000,
    engine_factory: Callable[[], ParameterEngine] = _default_engine,
) -> None:  # pragma: no cover - integration path
    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - optional dependency
        raise RuntimeError(
            "uvicorn is required to run the service. Install it with `pip install uvicorn`."
        ) from exc

    app = create_app(engine_factory)
    uvicorn.run(app, host=host, port=port)
