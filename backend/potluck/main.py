from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from potluck import config
from potluck.db.database import async_session_factory, engine
from potluck.models.api import RetryRequest, ToggleRequest
from potluck.models.plan import PlanSnapshot
from potluck.models.shopping import EveryoneScope, PersonScope, ShoppingList, ShoppingScope, ToggleResult
from potluck.services.plan_store import PlanStore
from potluck.services.shopping_engine import (
    build_shopping_list,
    find_row,
    flatten_and_aggregate,
    flatten_leaves,
    format_shopping_text,
    scope_title,
)
from potluck.services.toggle_fanout import retry_refs, toggle_row

# Configure logging
logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger(__name__)

plan_store = PlanStore(async_session_factory)


def get_plan_store() -> PlanStore:
    return plan_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle context manager"""
    logger.info("Application starting up")
    yield
    logger.info("Application shutting down")
    await engine.dispose()


# Create FastAPI app
app = FastAPI(
    title="Potluck Shopping List",
    description="Per-person shopping lists for collaborative meal plans",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Shared helpers
# ============================================================================


async def _load_snapshot(event_id: int, store: PlanStore) -> PlanSnapshot:
    snapshot = await store.load_snapshot(event_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return snapshot


def _resolve_scope(snapshot: PlanSnapshot, person_id: Optional[int]) -> ShoppingScope:
    """No person_id means everyone's list."""
    if person_id is None:
        return EveryoneScope()
    if snapshot.find_person(person_id) is None:
        raise HTTPException(status_code=404, detail="Person not found")
    return PersonScope(person_id=person_id)


def _toggle_response(result: ToggleResult) -> JSONResponse:
    # 207 tells the client some leaves need a retry
    code = status.HTTP_200_OK if result.ok else status.HTTP_207_MULTI_STATUS
    return JSONResponse(status_code=code, content=result.model_dump(mode="json"))


# ============================================================================
# REST Endpoints: Health
# ============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok"}


# ============================================================================
# REST Endpoints: Shopping list
# ============================================================================


@app.get("/api/events/{event_id}/shopping", response_model=ShoppingList)
async def get_shopping_list(
    event_id: int,
    person_id: Optional[int] = None,
    store: PlanStore = Depends(get_plan_store),
):
    """Aggregated shopping list for one person, or for everyone."""
    snapshot = await _load_snapshot(event_id, store)
    scope = _resolve_scope(snapshot, person_id)
    return build_shopping_list(snapshot, scope)


@app.get("/api/events/{event_id}/shopping/text", response_class=PlainTextResponse)
async def get_shopping_text(
    event_id: int,
    person_id: Optional[int] = None,
    store: PlanStore = Depends(get_plan_store),
):
    """Same list as a markdown checklist, for copy/paste."""
    snapshot = await _load_snapshot(event_id, store)
    scope = _resolve_scope(snapshot, person_id)
    rows = flatten_and_aggregate(snapshot, scope)
    return format_shopping_text(rows, title=f"Liste de courses · {scope_title(snapshot, scope)}")


@app.post("/api/events/{event_id}/shopping/toggle")
async def toggle_shopping_row(
    event_id: int,
    request: ToggleRequest,
    store: PlanStore = Depends(get_plan_store),
):
    """
    Check or uncheck one row.

    Rows are re-derived from the current plan so the fan-out hits exactly the
    records that make up the row right now.
    """
    snapshot = await _load_snapshot(event_id, store)
    scope = _resolve_scope(snapshot, request.person_id)
    row = find_row(flatten_and_aggregate(snapshot, scope), request.row_key)
    if row is None:
        raise HTTPException(status_code=404, detail="Shopping row not found")

    result = await toggle_row(row, request.checked, store.update_leaf_checked)
    return _toggle_response(result)


@app.post("/api/events/{event_id}/shopping/retry")
async def retry_shopping_toggle(
    event_id: int,
    request: RetryRequest,
    store: PlanStore = Depends(get_plan_store),
):
    """Re-issue only the leaves that failed in an earlier toggle."""
    snapshot = await _load_snapshot(event_id, store)
    known = {leaf.ref for leaf in flatten_leaves(snapshot, EveryoneScope())}
    unknown = [ref for ref in request.refs if ref not in known]
    if unknown:
        logger.warning("Retry on event %s rejected: %d refs not in the plan", event_id, len(unknown))
        raise HTTPException(status_code=404, detail="Shopping leaf not found")

    result = await retry_refs(request.refs, request.checked, store.update_leaf_checked)
    return _toggle_response(result)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
