"""FastAPI application that turns repository events into pipeline runs."""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import NotesPubConfig
from ..orchestrator import Orchestrator
from ..scheduler import RunQueue, RunRecord
from ..triggers import trigger_for_dispatch, trigger_for_push


class PushEvent(BaseModel):
    ref: str


class DispatchRequest(BaseModel):
    ref: Optional[str] = None


class StepView(BaseModel):
    name: str
    success: bool
    detail: str = ""


class RunView(BaseModel):
    run_id: str
    trigger: str
    ref: Optional[str] = None
    status: str
    state: Optional[str] = None
    error: Optional[str] = None
    steps: List[StepView] = []


class TriggerResponse(BaseModel):
    status: str
    run: Optional[RunView] = None


class HealthResponse(BaseModel):
    status: str


def _view(record: RunRecord) -> RunView:
    report = record.report
    return RunView(
        run_id=record.run_id,
        trigger=record.trigger.kind,
        ref=record.trigger.ref,
        status=record.status.value,
        state=report.state.value if report is not None else None,
        error=record.error,
        steps=[
            StepView(name=step.name, success=step.success, detail=step.detail)
            for step in (report.steps if report is not None else [])
        ],
    )


def queue_for_config(
    config: NotesPubConfig,
    orchestrator_factory: Callable[[], Orchestrator] = Orchestrator,
) -> RunQueue:
    """Return a run queue that executes the full pipeline for ``config``."""

    def _execute(record: RunRecord):
        return orchestrator_factory().run(config, record.trigger, run_id=record.run_id)

    return RunQueue(_execute)


def create_app(
    queue: RunQueue,
    *,
    branches: Sequence[str] = ("main",),
    allow_dispatch: bool = True,
) -> FastAPI:
    """Create the FastAPI application exposing pipeline triggers."""
    app = FastAPI(title="notespub", version="1.0.0")
    app.state.queue = queue

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/hooks/push", response_model=TriggerResponse, status_code=202)
    async def push(event: PushEvent) -> TriggerResponse:
        trigger = trigger_for_push(event.ref, branches)
        if trigger is None:
            return TriggerResponse(status="ignored")
        return TriggerResponse(status="queued", run=_view(queue.submit(trigger)))

    @app.post("/dispatch", response_model=TriggerResponse, status_code=202)
    async def dispatch(payload: DispatchRequest) -> TriggerResponse:
        if not allow_dispatch:
            raise HTTPException(status_code=403, detail="Manual dispatch is disabled")
        record = queue.submit(trigger_for_dispatch(payload.ref))
        return TriggerResponse(status="queued", run=_view(record))

    @app.get("/runs", response_model=List[RunView])
    async def list_runs() -> List[RunView]:
        return [_view(record) for record in queue.runs()]

    @app.get("/runs/{run_id}", response_model=RunView)
    async def get_run(run_id: str) -> RunView:
        record = queue.get(run_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"Unknown run {run_id}")
        return _view(record)

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: object, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    return app


def run_service(
    config: NotesPubConfig, host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    queue = queue_for_config(config)
    app = create_app(
        queue,
        branches=config.triggers.branches,
        allow_dispatch=config.triggers.allow_dispatch,
    )
    try:
        uvicorn.run(app, host=host, port=port)
    finally:
        queue.shutdown(timeout=5)
