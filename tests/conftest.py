"""
Shared fixtures: a migrated in-memory SQLite database per test.
"""

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from game_reviews.db.migrations import migrate
from game_reviews.db.session import make_engine
from game_reviews.db.stores import GameStore, ReviewStore


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    migrate(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def games(db):
    return GameStore(db)


@pytest.fixture
def reviews(db):
    return ReviewStore(db)


@pytest.fixture
def mario_kart(games):
    return games.create(title="Mario Kart", genre="Racing", platform="Switch", price=60)
