"""
Explicit one-to-many wiring between a parent model and a child model.

A child declares `BelongsTo(name, parent, foreign_key)`, the parent declares
`HasMany(name, child, foreign_key)`. `resolve()` checks the pair against the mapped
tables once and returns an `Association` exposing the four operations both sides need:

- `fetch_parent`   child -> parent through the foreign key
- `fetch_children` parent -> children, `WHERE <foreign_key> = parent.id`
- `create_parent`  insert a new parent and point the child at it
- `append_child`   insert a child already carrying the parent's id

The naming rule is the only convention checked: the foreign key must be
`<singular parent table>_id`, the belongs-to name the singular parent table and the
has-many name the child table. Anything else is an `AssociationConfigError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Type

from sqlalchemy import inspect as sa_inspect
from sqlalchemy import select
from sqlalchemy.orm import Session

from game_reviews.db.base import Base
from game_reviews.db.errors import AssociationConfigError, NotFound
from game_reviews.db.session import commit, flush

logger = logging.getLogger("game_reviews.db.associations")


def singularize(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


@dataclass(frozen=True)
class BelongsTo:
    name: str
    parent: Type[Base]
    foreign_key: str


@dataclass(frozen=True)
class HasMany:
    name: str
    child: Type[Base]
    foreign_key: str


class Association:
    """A validated belongs-to / has-many pair."""

    def __init__(self, belongs_to: BelongsTo, has_many: HasMany, fk_attr: str, pk_attr: str):
        self.belongs_to = belongs_to
        self.has_many = has_many
        self.parent = belongs_to.parent
        self.child = has_many.child
        self._fk_attr = fk_attr
        self._pk_attr = pk_attr

    def __repr__(self) -> str:
        return (
            f"<Association {self.child.__name__}.{self.belongs_to.name} -> "
            f"{self.parent.__name__}.{self.has_many.name} via {self.belongs_to.foreign_key}>"
        )

    def parent_id(self, parent: Any) -> Any:
        """Return the primary key of `parent`, which may be a record or a raw id."""
        if isinstance(parent, self.parent):
            return getattr(parent, self._pk_attr)
        return parent

    def reference_of(self, child: Base) -> Any:
        return getattr(child, self._fk_attr)

    def fetch_parent(self, session: Session, child: Base) -> Base:
        parent_id = self.reference_of(child)
        if parent_id is None:
            raise NotFound(self.parent.__name__, None)
        parent = session.get(self.parent, parent_id)
        if parent is None:
            logger.debug("%r points at missing %s id=%s", child, self.parent.__name__, parent_id)
            raise NotFound(self.parent.__name__, parent_id)
        return parent

    def fetch_children(self, session: Session, parent: Any) -> List[Base]:
        fk_column = getattr(self.child, self._fk_attr)
        pk_column = sa_inspect(self.child).primary_key[0]
        stmt = select(self.child).where(fk_column == self.parent_id(parent)).order_by(pk_column)
        return list(session.scalars(stmt))

    def create_parent(self, session: Session, child: Base, **attributes: Any) -> Base:
        parent = self.parent(**attributes)
        session.add(parent)
        flush(session)
        self._attach(child, parent)
        session.add(child)
        commit(session)
        self._expire(session, child, self.belongs_to.name)
        logger.info("Created %r and attached %r", parent, child)
        return parent

    def append_child(self, session: Session, parent: Base, child: Optional[Base] = None, **attributes: Any) -> Base:
        if getattr(parent, self._pk_attr) is None:
            session.add(parent)
            flush(session)
        if child is None:
            child = self.child(**attributes)
        else:
            for key, value in attributes.items():
                setattr(child, key, value)
        self._attach(child, parent)
        session.add(child)
        commit(session)
        self._expire(session, parent, self.has_many.name)
        self._expire(session, child, self.belongs_to.name)
        logger.info("Appended %r to %r", child, parent)
        return child

    def _attach(self, child: Base, parent: Base) -> None:
        # A relationship already set on the child wins over the column at flush time.
        if self.belongs_to.name in sa_inspect(self.child).relationships:
            setattr(child, self.belongs_to.name, parent)
        setattr(child, self._fk_attr, getattr(parent, self._pk_attr))

    @staticmethod
    def _expire(session: Session, obj: Base, name: str) -> None:
        # Sessions keep objects across commits, so a loaded relationship would go stale.
        if name in sa_inspect(type(obj)).relationships:
            session.expire(obj, [name])


def resolve(belongs_to: BelongsTo, has_many: HasMany) -> Association:
    """Validate a belongs-to / has-many pair and return the resulting `Association`."""
    parent, child = belongs_to.parent, has_many.child
    parent_table = parent.__table__
    child_table = child.__table__

    if belongs_to.foreign_key != has_many.foreign_key:
        raise AssociationConfigError(
            f"{belongs_to.name!r} uses foreign key {belongs_to.foreign_key!r} "
            f"but {has_many.name!r} uses {has_many.foreign_key!r}"
        )

    singular = singularize(parent_table.name)
    if belongs_to.name != singular:
        raise AssociationConfigError(f"belongs-to name {belongs_to.name!r} does not match table {parent_table.name!r}")
    if has_many.name != child_table.name:
        raise AssociationConfigError(f"has-many name {has_many.name!r} does not match table {child_table.name!r}")
    if belongs_to.foreign_key != f"{singular}_id":
        raise AssociationConfigError(f"foreign key {belongs_to.foreign_key!r} should be {singular + '_id'!r}")

    column = child_table.c.get(belongs_to.foreign_key)
    if column is None:
        raise AssociationConfigError(f"{child_table.name} has no column {belongs_to.foreign_key!r}")
    if not any(fk.references(parent_table) and fk.column.primary_key for fk in column.foreign_keys):
        raise AssociationConfigError(
            f"{child_table.name}.{column.name} is not a foreign key to the primary key of {parent_table.name}"
        )

    parent_mapper = sa_inspect(parent)
    pk_attr = parent_mapper.get_property_by_column(parent_mapper.primary_key[0]).key
    fk_attr = sa_inspect(child).get_property_by_column(column).key
    return Association(belongs_to, has_many, fk_attr=fk_attr, pk_attr=pk_attr)
