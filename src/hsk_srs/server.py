import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from hsk_srs.application.config import resolve_config
from hsk_srs.application.factory import build_service
from hsk_srs.application.service import SchedulerService
from hsk_srs.consts import VERSION
from hsk_srs.domain.cards.models import ProgressSummary
from hsk_srs.domain.errors import CardNotFoundError, SrsError
from hsk_srs.infrastructure.adapters.records import card_to_record

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("hsk_srs.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"hsk-srs server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("hsk-srs server shutting down...")


app = FastAPI(
    title="hsk-srs",
    description="Spaced-repetition scheduler for HSK vocabulary.",
    version=VERSION,
    lifespan=lifespan,
)

start_time = time.time()


@lru_cache
def get_service() -> SchedulerService:
    """One service per process; sync endpoints share it across worker threads."""
    return build_service(resolve_config())


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class SaveWordRequest(BaseModel):
    key: str
    level: str | int | None = None
    pinyin: str = ""
    vi: str = ""
    en: str = ""


class ReviewRequest(BaseModel):
    # Exactly one of these; rating is again/hard/good/easy
    quality: int | None = None
    rating: str | None = None


class ProgressResponse(BaseModel):
    level: str
    new: int
    learning: int
    mastered: int
    total: int


def _progress(level: str, summary: ProgressSummary) -> ProgressResponse:
    return ProgressResponse(
        level=level,
        new=summary.new_count,
        learning=summary.learning_count,
        mastered=summary.mastered_count,
        total=summary.total,
    )


def _unprocessable(e: SrsError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(e))


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.post("/cards")
def save_word(req: SaveWordRequest, service: SchedulerService = Depends(get_service)):
    """Save a word; ``created`` is false when it was already saved."""
    try:
        created = service.save_word(req.key, req.level, pinyin=req.pinyin, vi=req.vi, en=req.en)
    except SrsError as e:
        raise _unprocessable(e) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    card = service.get_card(req.key.strip())
    return {"created": created, "card": card_to_record(card) if card else None}


@app.get("/cards/{key}")
def get_card(key: str, service: SchedulerService = Depends(get_service)) -> dict[str, Any]:
    card = service.get_card(key)
    if card is None:
        raise HTTPException(status_code=404, detail=str(CardNotFoundError(key)))
    return card_to_record(card)


@app.post("/cards/{key}/review")
def review_card(
    key: str, req: ReviewRequest, service: SchedulerService = Depends(get_service)
) -> dict[str, Any]:
    if (req.quality is None) == (req.rating is None):
        raise HTTPException(status_code=422, detail="Provide exactly one of 'quality' or 'rating'")

    try:
        if req.rating is not None:
            card = service.review_with_rating(key, req.rating)
        else:
            card = service.review(key, req.quality)
    except CardNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except SrsError as e:
        raise _unprocessable(e) from e
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return card_to_record(card)


@app.post("/lookups/{key}")
def record_lookup(key: str, service: SchedulerService = Depends(get_service)):
    try:
        count = service.record_lookup(key)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
    return {"key": key.strip(), "count": count}


@app.get("/levels/{level}/queue")
def level_queue(level: str, service: SchedulerService = Depends(get_service)):
    try:
        tag = service.normalize_level(level)
    except SrsError as e:
        raise _unprocessable(e) from e
    cards = service.due_queue(tag)
    return {"level": tag, "cards": [card_to_record(c) for c in cards]}


@app.get("/levels/{level}/analytics", response_model=ProgressResponse)
def level_analytics(level: str, service: SchedulerService = Depends(get_service)):
    try:
        tag = service.normalize_level(level)
    except SrsError as e:
        raise _unprocessable(e) from e
    return _progress(tag, service.analytics(tag))


@app.get("/overview")
def overview(service: SchedulerService = Depends(get_service)):
    """Per-level progress plus the number of cards due across all levels."""
    return {
        "due": service.due_count(),
        "levels": [_progress(tag, s) for tag, s in service.overview().items()],
    }
