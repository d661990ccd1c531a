"""Exceptions raised by the stores and the association wiring."""

from typing import Any


class GameReviewsError(Exception):
    """Base class for errors raised by this package."""


class NotFound(GameReviewsError, LookupError):
    """No record of `model` exists with the given identifier."""

    def __init__(self, model: str, record_id: Any):
        self.model = model
        self.record_id = record_id
        super().__init__(f"{model} with id={record_id!r} not found")


class InvalidRecord(GameReviewsError, ValueError):
    """Attributes were rejected before reaching the database."""


class AssociationConfigError(GameReviewsError):
    """A belongs-to / has-many pair does not line up with the mapped tables."""
