"""
Association wiring: declaration checks and the four operations on the games/reviews pair.
"""

import pytest
from sqlalchemy import ForeignKey, Integer, Text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from game_reviews.db.associations import BelongsTo, HasMany, resolve, singularize
from game_reviews.db.errors import AssociationConfigError, NotFound
from game_reviews.db.models import GAME_REVIEWS, Game, Review


class _Base(DeclarativeBase):
    pass


class Studio(_Base):
    __tablename__ = "studios"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class Title(_Base):
    __tablename__ = "titles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(Text)
    studio_id: Mapped[int] = mapped_column(Integer, ForeignKey("studios.id"))
    publisher_id: Mapped[int] = mapped_column(Integer)


@pytest.mark.parametrize(
    "name, expected",
    [("games", "game"), ("reviews", "review"), ("categories", "category"), ("access", "access"), ("game", "game")],
)
def test_singularize(name, expected):
    assert singularize(name) == expected


def test_games_and_reviews_resolve():
    assert GAME_REVIEWS.parent is Game
    assert GAME_REVIEWS.child is Review
    assert GAME_REVIEWS.belongs_to.foreign_key == "game_id"


def test_valid_pair_resolves():
    association = resolve(BelongsTo("studio", Studio, "studio_id"), HasMany("titles", Title, "studio_id"))
    assert association.parent is Studio
    assert association.child is Title


@pytest.mark.parametrize(
    "belongs_to, has_many",
    [
        # foreign keys disagree
        (BelongsTo("studio", Studio, "studio_id"), HasMany("titles", Title, "publisher_id")),
        # belongs-to name is not the singular parent table
        (BelongsTo("maker", Studio, "studio_id"), HasMany("titles", Title, "studio_id")),
        # has-many name is not the child table
        (BelongsTo("studio", Studio, "studio_id"), HasMany("games", Title, "studio_id")),
        # foreign key does not follow <singular parent>_id
        (BelongsTo("studio", Studio, "publisher_id"), HasMany("titles", Title, "publisher_id")),
    ],
)
def test_mismatched_declarations_are_rejected(belongs_to, has_many):
    with pytest.raises(AssociationConfigError):
        resolve(belongs_to, has_many)


def test_foreign_key_must_reference_parent():
    class Base2(DeclarativeBase):
        pass

    class Team(Base2):
        __tablename__ = "teams"

        id: Mapped[int] = mapped_column(Integer, primary_key=True)

    class Player(Base2):
        __tablename__ = "players"

        id: Mapped[int] = mapped_column(Integer, primary_key=True)
        team_id: Mapped[int] = mapped_column(Integer)

    with pytest.raises(AssociationConfigError, match="not a foreign key"):
        resolve(BelongsTo("team", Team, "team_id"), HasMany("players", Player, "team_id"))


def test_missing_column_is_rejected():
    class Base3(DeclarativeBase):
        pass

    class Team(Base3):
        __tablename__ = "teams"

        id: Mapped[int] = mapped_column(Integer, primary_key=True)

    class Player(Base3):
        __tablename__ = "players"

        id: Mapped[int] = mapped_column(Integer, primary_key=True)

    with pytest.raises(AssociationConfigError, match="no column"):
        resolve(BelongsTo("team", Team, "team_id"), HasMany("players", Player, "team_id"))


def test_parent_id_accepts_record_or_id(mario_kart):
    assert GAME_REVIEWS.parent_id(mario_kart) == mario_kart.id
    assert GAME_REVIEWS.parent_id(mario_kart.id) == mario_kart.id


def test_fetch_parent_and_children(db, mario_kart, reviews):
    review = reviews.create(score=8, comment="A classic", game=mario_kart)
    assert GAME_REVIEWS.fetch_parent(db, review) == mario_kart
    assert GAME_REVIEWS.fetch_children(db, mario_kart) == [review]


def test_fetch_parent_without_reference(db):
    with pytest.raises(NotFound):
        GAME_REVIEWS.fetch_parent(db, Review(score=1, comment="x"))


def test_append_child_saves_unsaved_parent(db):
    game = Game(title="Unsaved", genre="Puzzle", platform="PC", price=1)
    review = GAME_REVIEWS.append_child(db, game, score=4, comment="ok")
    assert game.id is not None
    assert review.game_id == game.id


def test_append_child_applies_attributes_to_given_child(db, mario_kart):
    review = GAME_REVIEWS.append_child(db, mario_kart, Review(score=1), comment="late comment")
    assert review.comment == "late comment"
    assert review.game_id == mario_kart.id


def test_create_parent_counts_one_game(db, games, reviews):
    review = reviews.create(score=2, comment="meh")
    game = GAME_REVIEWS.create_parent(db, review, title="Brand New")
    assert games.count() == 1
    assert review.game_id == game.id


def test_session_usable_after_rejected_flush(db, games):
    with pytest.raises(IntegrityError):
        GAME_REVIEWS.append_child(db, Game(title="Negative", price=-1), score=1, comment="x")

    assert games.count() == 0
    assert games.create(title="Fine", genre="Puzzle", platform="PC", price=1).id is not None


def test_create_parent_rolls_back_rejected_game(db, games, reviews):
    review = reviews.create(score=2, comment="meh")
    with pytest.raises(IntegrityError):
        GAME_REVIEWS.create_parent(db, review, title="Negative", price=-1)

    assert games.count() == 0
    assert reviews.find(review.id).game_id is None
