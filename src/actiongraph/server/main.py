from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from actiongraph import settings
from actiongraph.coordinator import PipelineCoordinator
from actiongraph.errors import PipelineError
from actiongraph.pipeline import run_pipeline
from actiongraph.store import SourceStore, make_store

# -------------------- Schemas --------------------

class SourceRequest(BaseModel):
    text: str

class SourceResponse(BaseModel):
    text: Optional[str]

class SubmitResponse(BaseModel):
    status: str
    debounce_seconds: float

class ResultResponse(BaseModel):
    status: str
    workflow: Optional[dict[str, Any]] = None
    layout: Optional[dict[str, Any]] = None
    error: Optional[dict[str, Any]] = None

# -------------------- App --------------------

def create_app(
    store: Optional[SourceStore] = None,
    *,
    debounce_seconds: float = settings.DEBOUNCE_SECONDS,
    retain_last_success: bool = settings.RETAIN_LAST_SUCCESS,
) -> FastAPI:
    coordinator = PipelineCoordinator(
        store if store is not None else make_store(),
        debounce_seconds=debounce_seconds,
        retain_last_success=retain_last_success,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await coordinator.start()
        yield
        coordinator.close()

    app = FastAPI(title="actiongraph", lifespan=lifespan)
    app.state.coordinator = coordinator

    # -------------------- Endpoints --------------------

    @app.post("/source", response_model=SubmitResponse, status_code=202)
    async def submit_source(req: SourceRequest):
        await coordinator.submit(req.text)
        return SubmitResponse(status="scheduled", debounce_seconds=coordinator.debounce_seconds)

    @app.get("/source", response_model=SourceResponse)
    async def get_source():
        return SourceResponse(text=coordinator.source)

    @app.get("/result", response_model=ResultResponse)
    async def get_result():
        return ResultResponse(**coordinator.current_result.to_dict())

    @app.post("/validate", response_model=ResultResponse)
    async def validate(req: SourceRequest):
        # bypasses the debounce and does not touch the coordinator's state
        try:
            state = run_pipeline(req.text)
        except PipelineError as e:
            return JSONResponse(status_code=422, content={"status": "error", "error": e.to_dict()})
        except Exception as e:
            err = PipelineError(kind="InternalError", message=f"{type(e).__name__}: {e}")
            return JSONResponse(status_code=500, content={"status": "error", "error": err.to_dict()})
        return ResultResponse(**state.to_dict())

    return app


app = create_app()
