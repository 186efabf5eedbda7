import logging
import random
import time
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, Field

from nihongo_flow.application.config import log_level, resolve_config
from nihongo_flow.application.factory import get_collection_provider, get_event_log
from nihongo_flow.consts import VERSION
from nihongo_flow.domain.constants import ACTIVITY_WINDOW_DAYS
from nihongo_flow.domain.errors import EventAppendError, ItemNotFoundError
from nihongo_flow.domain.models import (
    Category,
    LearningStage,
    Outcome,
    ReviewEvent,
    SessionConfig,
    StudyItem,
)
from nihongo_flow.domain.ports import CollectionProvider, EventLogProvider

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("nihongo_flow.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"nihongo-flow server v{VERSION} starting up...")
    config = resolve_config()
    logging.getLogger().setLevel(log_level(config.verbose))
    # Shared by every request for the lifetime of the app
    app.state.collections = get_collection_provider(config)
    app.state.event_log = get_event_log(config)
    logger.info(f"Using {config.storage} storage")
    yield
    # Shutdown
    logger.info("nihongo-flow server shutting down...")


app = FastAPI(
    title="nihongo-flow",
    description="Local API for Japanese study cards and review sessions.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


# ---------- Dependencies ----------


def collections_dep(request: Request) -> CollectionProvider:
    return request.app.state.collections


def event_log_dep(request: Request) -> EventLogProvider:
    return request.app.state.event_log


Collections = Annotated[CollectionProvider, Depends(collections_dep)]
EventLog = Annotated[EventLogProvider, Depends(event_log_dep)]


# ---------- Schemas ----------


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class ItemResponse(BaseModel):
    category: Category
    id: str
    front: str
    back: str
    jlpt: str
    chapter: str
    source: str | None = None
    stage: LearningStage | None = None
    mastery: int | None = None


class ProgressResponse(BaseModel):
    category: Category
    item_id: str
    interval: float
    stage: LearningStage
    mastery: int
    reviews: int
    last_reviewed: datetime | None = None


class ReviewRequest(BaseModel):
    category: Category
    item_id: str
    outcome: Outcome


class ReviewResponse(BaseModel):
    timestamp: datetime
    category: Category
    item_id: str
    outcome: Outcome


class SessionRequest(BaseModel):
    categories: list[Category] = Field(default_factory=lambda: list(Category))
    levels: list[str] = Field(default_factory=list)
    chapters: list[str] = Field(default_factory=list)
    sources: list[str] = Field(default_factory=list)
    limit: int = Field(default=0, ge=0)
    seed: int | None = None


class SessionResponse(BaseModel):
    matched: int
    items: list[ItemResponse]


class CategoryProgressResponse(BaseModel):
    category: Category
    total_items: int
    learned: int


class ItemFieldsRequest(BaseModel):
    fields: dict[str, str | list[str] | None]


class RemovedResponse(BaseModel):
    removed: int


class DayActivityResponse(BaseModel):
    day: date
    count: int


class OverviewResponse(BaseModel):
    streak: int
    categories: list[CategoryProgressResponse]
    activity: list[DayActivityResponse] = Field(default_factory=list)


def _item_response(category: Category, item: StudyItem, **extra) -> ItemResponse:
    return ItemResponse(
        category=category,
        id=item.id,
        front=item.front,
        back=item.back,
        jlpt=item.jlpt,
        chapter=item.chapter,
        source=item.source,
        **extra,
    )


async def _require_item(collections: CollectionProvider, category: Category, item_id: str):
    items = await collections.list_items(category)
    if not any(item.id == item_id for item in items):
        raise HTTPException(status_code=404, detail=f"No {category.value} item {item_id!r}")


# ---------- Routes ----------


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/items/{category}", response_model=list[ItemResponse])
async def list_items(
    category: Category,
    collections: Collections,
    event_log: EventLog,
    level: str | None = None,
    stage: LearningStage | None = None,
    q: str | None = None,
):
    """List a collection with each item's stage and mastery."""
    from nihongo_flow.application.catalog import list_with_progress

    items = await collections.list_items(category)
    events = await event_log.list_events(category=category)
    entries = list_with_progress(category, items, events, level=level, stage=stage, query=q)
    return [
        _item_response(category, e.item, stage=e.progress.stage, mastery=e.progress.mastery)
        for e in entries
    ]


@app.get("/items/{category}/{item_id}/progress", response_model=ProgressResponse)
async def item_progress(
    category: Category, item_id: str, collections: Collections, event_log: EventLog
):
    from nihongo_flow.application.scheduler import item_progress as derive

    await _require_item(collections, category, item_id)
    events = await event_log.list_events(category=category, item_id=item_id)
    p = derive(events, category, item_id)
    return ProgressResponse(
        category=p.category,
        item_id=p.item_id,
        interval=p.interval,
        stage=p.stage,
        mastery=p.mastery,
        reviews=p.reviews,
        last_reviewed=p.last_reviewed,
    )


@app.post("/reviews", response_model=ReviewResponse, status_code=201)
async def log_review(req: ReviewRequest, collections: Collections, event_log: EventLog):
    """
    Append one review outcome to the log.
    """
    from nihongo_flow.application.review_session import utc_now

    await _require_item(collections, req.category, req.item_id)
    event = ReviewEvent(
        timestamp=utc_now(), category=req.category, item_id=req.item_id, outcome=req.outcome
    )
    try:
        await event_log.append_event(event)
    except EventAppendError as e:
        logger.error(f"Review append failed: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return ReviewResponse(
        timestamp=event.timestamp,
        category=event.category,
        item_id=event.item_id,
        outcome=event.outcome,
    )


@app.post("/sessions/preview", response_model=SessionResponse)
async def preview_session(req: SessionRequest, collections: Collections):
    """
    Run the session builder and return the queue without starting a session.
    """
    from nihongo_flow.application.session_builder import build_session, load_collections

    config = SessionConfig(
        categories=frozenset(req.categories),
        levels=frozenset(req.levels),
        chapters=frozenset(req.chapters),
        sources=frozenset(req.sources),
        limit=req.limit,
    )
    snapshot = await load_collections(collections, config.categories)
    rng = random.Random(req.seed) if req.seed is not None else None
    result = build_session(snapshot, config, rng)
    if result.is_empty:
        raise HTTPException(status_code=404, detail="No items matched the session criteria.")

    return SessionResponse(
        matched=result.matched,
        items=[_item_response(s.category, s.item) for s in result.items],
    )


@app.get("/progress", response_model=OverviewResponse)
async def progress_overview(
    collections: Collections,
    event_log: EventLog,
    days: Annotated[int, Query(ge=1)] = ACTIVITY_WINDOW_DAYS,
):
    """
    Streak, learned counts per category and daily review activity, oldest day first.
    """
    from nihongo_flow.application.progress import ProgressService

    service = ProgressService(collections, event_log)
    learned = await service.learned_counts()
    activity = await service.daily_activity(days=days)
    return OverviewResponse(
        streak=await service.current_streak(),
        activity=[DayActivityResponse(day=a.day, count=a.count) for a in activity],
        categories=[
            CategoryProgressResponse(
                category=p.category, total_items=p.total_items, learned=p.learned
            )
            for p in learned
        ],
    )


# ---------- Editing ----------


def _collection_service(collections: CollectionProvider, event_log: EventLogProvider):
    from nihongo_flow.application.collection_service import CollectionService

    return CollectionService(collections, event_log)


@app.post("/items/{category}", response_model=ItemResponse, status_code=201)
async def add_item(
    category: Category, req: ItemFieldsRequest, collections: Collections, event_log: EventLog
):
    """
    Add an item. The id is assigned by the collection.
    """
    try:
        item = await _collection_service(collections, event_log).add(category, req.fields)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    logger.info(f"Added {category.value} item {item.id}")
    return _item_response(category, item)


@app.put("/items/{category}/{item_id}", response_model=ItemResponse)
async def edit_item(
    category: Category,
    item_id: str,
    req: ItemFieldsRequest,
    collections: Collections,
    event_log: EventLog,
):
    service = _collection_service(collections, event_log)
    try:
        item = await service.edit(category, item_id, req.fields)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return _item_response(category, item)


@app.delete("/items/{category}/{item_id}", response_model=RemovedResponse)
async def delete_item(
    category: Category, item_id: str, collections: Collections, event_log: EventLog
):
    """
    Delete one item. Its review history stays in the log.
    """
    removed = await _collection_service(collections, event_log).delete(category, [item_id])
    if removed == 0:
        raise HTTPException(status_code=404, detail=f"No {category.value} item {item_id!r}")
    return RemovedResponse(removed=removed)


@app.delete("/items/{category}/{item_id}/reviews", response_model=RemovedResponse)
async def reset_item_history(
    category: Category, item_id: str, collections: Collections, event_log: EventLog
):
    """
    Drop every review of one item.
    """
    service = _collection_service(collections, event_log)
    try:
        removed = await service.reset_history(category, item_id)
    except ItemNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    return RemovedResponse(removed=removed)
