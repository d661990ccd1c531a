"""
Declarative base for the games and reviews tables.

Tables are created by the ordered steps in `game_reviews.db.migrations`, not by calling
`Base.metadata.create_all()` from application code.
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

# Names for the constraints and indexes the schema actually has:
# ck_games_price_non_negative, fk_reviews_game_id_games, ix_reviews_game_id, pk_<table>.
# SQLite and PostgreSQL would otherwise each pick their own.
_NAMING_CONVENTION = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Shared metadata for every mapped table in the package."""

    metadata = MetaData(naming_convention=_NAMING_CONVENTION)
