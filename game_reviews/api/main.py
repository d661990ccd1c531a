import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from game_reviews.api.schemas import GameIn, GameOut, GameReviewIn, NewGameIn, ReviewIn, ReviewOut
from game_reviews.db.errors import InvalidRecord, NotFound
from game_reviews.db.migrations import migrate
from game_reviews.db.session import db_healthcheck, get_db, get_engine
from game_reviews.db.stores import GameStore, ReviewStore

logger = logging.getLogger("game_reviews.api")


@asynccontextmanager
async def lifespan(_app: FastAPI):
    logging.basicConfig(
        level=os.getenv("GAME_REVIEWS_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    applied = migrate(get_engine())
    if applied:
        logger.info("Migrated schema: %s", ", ".join(applied))
    yield


openapi_tags = [
    {"name": "Health", "description": "Service and dependency health checks."},
    {"name": "Games", "description": "Games and the reviews attached to them."},
    {"name": "Reviews", "description": "Reviews and the game each one belongs to."},
]

app = FastAPI(
    title="Game Reviews API",
    description="Games, reviews, and the one-to-many association between them.",
    version="0.1.0",
    openapi_tags=openapi_tags,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(_request: Request, exc: NotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(InvalidRecord)
async def invalid_record_handler(_request: Request, exc: InvalidRecord):
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.get("/", tags=["Health"], summary="Service health check")
def health_check():
    """Basic health check for the backend service (no external dependencies)."""
    return {"message": "Healthy"}


@app.get("/health/db", tags=["Health"], summary="Database health check")
def health_db_check(db: Session = Depends(get_db)):
    """
    Check database connectivity.

    Returns a JSON payload indicating whether the database is reachable.
    """
    ok = db_healthcheck(db.get_bind())
    return {"database": "ok" if ok else "unreachable", "ok": ok}


@app.post("/games", tags=["Games"], response_model=GameOut, status_code=201)
def create_game(body: GameIn, db: Session = Depends(get_db)):
    return GameStore(db).create(body.title, body.genre, body.platform, body.price)


@app.get("/games/{game_id}", tags=["Games"], response_model=GameOut)
def get_game(game_id: int, db: Session = Depends(get_db)):
    return GameStore(db).find(game_id)


@app.get("/games/{game_id}/reviews", tags=["Games"], response_model=List[ReviewOut])
def list_game_reviews(game_id: int, db: Session = Depends(get_db)):
    games = GameStore(db)
    return games.reviews(games.find(game_id))


@app.post("/games/{game_id}/reviews", tags=["Games"], response_model=ReviewOut, status_code=201)
def append_game_review(game_id: int, body: GameReviewIn, db: Session = Depends(get_db)):
    return GameStore(db).create_review(game_id, body.score, body.comment)


@app.post("/reviews", tags=["Reviews"], response_model=ReviewOut, status_code=201)
def create_review(body: ReviewIn, db: Session = Depends(get_db)):
    return ReviewStore(db).create(body.score, body.comment, body.game_id)


@app.get("/reviews/{review_id}", tags=["Reviews"], response_model=ReviewOut)
def get_review(review_id: int, db: Session = Depends(get_db)):
    return ReviewStore(db).find(review_id)


@app.get("/reviews/{review_id}/game", tags=["Reviews"], response_model=GameOut)
def get_review_game(review_id: int, db: Session = Depends(get_db)):
    reviews = ReviewStore(db)
    return reviews.get_game(reviews.find(review_id))


@app.post("/reviews/{review_id}/game", tags=["Reviews"], response_model=GameOut, status_code=201)
def create_review_game(review_id: int, body: NewGameIn, db: Session = Depends(get_db)):
    reviews = ReviewStore(db)
    return reviews.create_game(reviews.find(review_id), **body.model_dump(exclude_none=True))
