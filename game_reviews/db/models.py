"""
SQLAlchemy ORM models for the games and reviews tables.

Important:
- The schema is created by `game_reviews.db.migrations`; these classes only map it.
- `reviews.game_id` is nullable: a review may exist before it is attached to a game.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from game_reviews.db.associations import BelongsTo, HasMany, resolve
from game_reviews.db.base import Base


class TimestampMixin:
    """Common timestamp columns in the schema."""

    # Fetch server-generated timestamps during flush instead of lazily after commit.
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )


class Game(Base, TimestampMixin):
    """games table."""

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    genre: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    platform: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    price: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    reviews: Mapped[List["Review"]] = relationship("Review", back_populates="game", order_by="Review.id")

    __table_args__ = (CheckConstraint("price >= 0", name="price_non_negative"),)

    def __repr__(self) -> str:
        return f"<Game id={self.id} title={self.title!r}>"


class Review(Base, TimestampMixin):
    """reviews table."""

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    score: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    game_id: Mapped[Optional[int]] = mapped_column(Integer, ForeignKey("games.id"), nullable=True, index=True)

    game: Mapped[Optional[Game]] = relationship("Game", back_populates="reviews")

    def __repr__(self) -> str:
        return f"<Review id={self.id} score={self.score} game_id={self.game_id}>"


# Review.game / Game.reviews as seen by the stores.
GAME_REVIEWS = resolve(
    BelongsTo(name="game", parent=Game, foreign_key="game_id"),
    HasMany(name="reviews", child=Review, foreign_key="game_id"),
)
