from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GameIn(BaseModel):
    title: str
    genre: str
    platform: str
    price: int = Field(ge=0)


class NewGameIn(BaseModel):
    """Attributes for a game created through a review; only the title is required."""

    title: str
    genre: Optional[str] = None
    platform: Optional[str] = None
    price: Optional[int] = Field(default=None, ge=0)


class GameOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: Optional[str] = None
    genre: Optional[str] = None
    platform: Optional[str] = None
    price: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ReviewIn(BaseModel):
    score: int
    comment: str
    game_id: Optional[int] = None


class GameReviewIn(BaseModel):
    score: int
    comment: str


class ReviewOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    score: Optional[int] = None
    comment: Optional[str] = None
    game_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
