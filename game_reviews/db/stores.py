"""
Game and review stores over a SQLAlchemy session.

Each public method is a single unit of work: it either commits or rolls back and raises.
The association operations (review -> game, game -> reviews, create-and-attach, append)
are delegated to `GAME_REVIEWS`.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Union

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from game_reviews.db.errors import InvalidRecord, NotFound
from game_reviews.db.models import GAME_REVIEWS, Game, Review
from game_reviews.db.session import commit, flush

logger = logging.getLogger("game_reviews.db.stores")

GameRef = Union[Game, int]


def _check_price(price: Optional[int]) -> None:
    if price is not None and price < 0:
        raise InvalidRecord(f"price must be non-negative, got {price}")


class GameStore:
    """Create and look up games, and reach their reviews."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, title: str, genre: str, platform: str, price: int) -> Game:
        _check_price(price)
        game = Game(title=title, genre=genre, platform=platform, price=price)
        self.db.add(game)
        commit(self.db)
        logger.info("Created %r", game)
        return game

    def find(self, game_id: int) -> Game:
        game = self.db.get(Game, game_id)
        if game is None:
            logger.debug("Game id=%s not found", game_id)
            raise NotFound("Game", game_id)
        return game

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Game))

    def reviews(self, game: GameRef) -> List[Review]:
        """Return the reviews referencing `game`, oldest first."""
        return GAME_REVIEWS.fetch_children(self.db, game)

    def create_review(self, game: GameRef, score: int, comment: str) -> Review:
        """Create a review already pointing at `game`."""
        return GAME_REVIEWS.append_child(self.db, self._record(game), score=score, comment=comment)

    def append_review(self, game: GameRef, review: Review) -> Review:
        """Attach an existing, possibly unsaved, review to `game` and persist it."""
        return GAME_REVIEWS.append_child(self.db, self._record(game), review)

    def _record(self, game: GameRef) -> Game:
        if isinstance(game, Game):
            return game
        return self.find(game)


class ReviewStore:
    """Create and look up reviews, and resolve the game each one belongs to."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, score: int, comment: str, game: Optional[GameRef] = None) -> Review:
        """
        Create a review.

        `game` may be a `Game` record, a raw game id, or None to leave the reference unset.
        The id is stored as given; it is only checked when the review's game is resolved.
        """
        if isinstance(game, Game):
            if game.id is None:
                _check_price(game.price)
                self.db.add(game)
                flush(self.db)
            game_id = game.id
        else:
            game_id = game
        review = Review(score=score, comment=comment, game_id=game_id)
        self.db.add(review)
        commit(self.db)
        logger.info("Created %r", review)
        return review

    def find(self, review_id: int) -> Review:
        review = self.db.get(Review, review_id)
        if review is None:
            logger.debug("Review id=%s not found", review_id)
            raise NotFound("Review", review_id)
        return review

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(Review))

    def get_game(self, review: Review) -> Game:
        return GAME_REVIEWS.fetch_parent(self.db, review)

    def create_game(self, review: Review, **attributes: Any) -> Game:
        """Create a new game from `attributes` and point `review` at it."""
        _check_price(attributes.get("price"))
        return GAME_REVIEWS.create_parent(self.db, review, **attributes)
