"""
Ordered schema steps for the games and reviews tables.

Each step runs in its own transaction and is recorded in `schema_migrations`, so
`migrate()` can be called on every startup and only applies what is missing.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Set, Tuple

from sqlalchemy import Column, DateTime, MetaData, String, Table, Text, func, insert, inspect, select
from sqlalchemy.engine import Connection, Engine

from game_reviews.db.models import Game, Review

logger = logging.getLogger("game_reviews.db.migrations")

schema_migrations = Table(
    "schema_migrations",
    MetaData(),
    Column("version", String(32), primary_key=True),
    Column("name", Text, nullable=False),
    Column("applied_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


def create_games(conn: Connection) -> None:
    Game.__table__.create(conn, checkfirst=True)


def create_reviews(conn: Connection) -> None:
    # Includes the foreign key to games.id and the index on game_id.
    Review.__table__.create(conn, checkfirst=True)


MIGRATIONS: List[Tuple[str, str, Callable[[Connection], None]]] = [
    ("20230101000001", "create_games", create_games),
    ("20230101000002", "create_reviews", create_reviews),
]


def applied_versions(engine: Engine) -> Set[str]:
    """Return the versions already recorded in `schema_migrations`."""
    with engine.connect() as conn:
        if not inspect(conn).has_table(schema_migrations.name):
            return set()
        return set(conn.scalars(select(schema_migrations.c.version)))


def migrate(engine: Engine) -> List[str]:
    """Apply every pending step in order and return the names of the steps applied."""
    schema_migrations.create(engine, checkfirst=True)
    done = applied_versions(engine)

    applied = []
    for version, name, step in MIGRATIONS:
        if version in done:
            continue
        with engine.begin() as conn:
            step(conn)
            conn.execute(insert(schema_migrations).values(version=version, name=name))
        logger.info("Applied migration %s %s", version, name)
        applied.append(name)

    if not applied:
        logger.debug("Schema is up to date")
    return applied
