"""HTTP endpoints for feedback intake, dashboard data, and chat.

- POST /api/feedback               - accept feedback, return a run id
- GET  /api/feedback               - persisted feedback plus aggregates
- GET  /api/feedback/runs/{run_id} - progress of one run
- POST /api/chat                   - ask a question about the feedback
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .errors import ValidationError
from .pipeline import FeedbackHub


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


class FeedbackIn(BaseModel):
    message: Optional[str] = None
    source: Optional[str] = None
    product: Optional[str] = None


class ChatIn(BaseModel):
    message: Optional[str] = None


def _hub(request: Request) -> FeedbackHub:
    return request.app.state.hub


@router.post("/feedback")
async def submit_feedback(body: FeedbackIn, request: Request):
    handle = await _hub(request).submit_feedback(body.message, source=body.source, product=body.product)
    return {"success": True, "runId": handle.run_id}


@router.get("/feedback")
async def list_feedback(request: Request, product: Optional[str] = Query(None, description='Exact product name or "all"')):
    view = _hub(request).dashboard(product)
    return {
        "items": [record.to_dict() for record in view["items"]],
        "aggregates": view["aggregates"].to_dict(),
    }


@router.get("/feedback/runs/{run_id}")
async def run_status(run_id: str, request: Request):
    state = _hub(request).run_status(run_id)
    if state is None:
        return JSONResponse(status_code=404, content={"success": False, "error": f"Run '{run_id}' not found"})
    return state.to_dict()


@router.post("/chat")
async def chat(body: ChatIn, request: Request):
    answer = await _hub(request).ask_chat(body.message)
    return {"success": True, "response": answer}


def create_app(hub: FeedbackHub) -> FastAPI:
    """Build the app; its lifespan owns the hub's run workers."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        hub.start()
        logger.info("Feedback hub started")
        try:
            yield
        finally:
            await hub.shutdown()
            logger.info("Feedback hub stopped")

    app = FastAPI(title="Feedback Hub", lifespan=lifespan)
    app.state.hub = hub

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    app.include_router(router)
    return app
