# This file decides what kind of logical collection a formatter input is.
# In-memory sequences and deferred queries are handled by the same pipeline, so every
# operation must hand back a value of the same kind it received.
# QueryCollection wraps a SQLAlchemy select so filters, sorting and slicing stay lazy.

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from sqlalchemy import func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

STRIP_INCLUDES = "includes"
STRIP_GROUP = "group"
STRIP_ORDER = "order"


class CollectionKind(Enum):
    MATERIALIZED = "materialized"
    DEFERRED = "deferred"
    SINGLE = "single"


@runtime_checkable
class Queryable(Protocol):
    """Capabilities a deferred collection exposes to the formatter."""

    def column(self, name: str) -> Any | None: ...

    def where(self, *criteria: Any) -> Queryable: ...

    def order_by(self, *clauses: Any) -> Queryable: ...

    def slice(self, start: int, stop: int) -> Queryable: ...

    def count(self, strip: frozenset[str] = frozenset()) -> int: ...

    def all(self) -> list[Any]: ...

    def __iter__(self) -> Iterator[Any]: ...


class QueryCollection:
    """Deferred collection backed by a SQLAlchemy `Select` and a `Session`.

    Eager-loading options are kept apart from the statement so the count query
    can drop them without rebuilding the caller's select.
    """

    def __init__(
        self,
        session: Session,
        statement: Select,
        *,
        loader_options: Sequence[Any] = (),
    ) -> None:
        self.session = session
        self.statement = statement
        self.loader_options = tuple(loader_options)

    def __repr__(self) -> str:
        return f"QueryCollection({self.statement})"

    @property
    def entity(self) -> Any:
        return self.statement.column_descriptions[0]["entity"]

    def column(self, name: str) -> Any | None:
        entity = self.entity
        if entity is None:
            return None
        return getattr(entity, name, None)

    def where(self, *criteria: Any) -> QueryCollection:
        return self._derive(self.statement.where(*criteria))

    def order_by(self, *clauses: Any) -> QueryCollection:
        return self._derive(self.statement.order_by(*clauses))

    def group_by(self, *clauses: Any) -> QueryCollection:
        return self._derive(self.statement.group_by(*clauses))

    def includes(self, *options: Any) -> QueryCollection:
        return QueryCollection(
            self.session,
            self.statement,
            loader_options=self.loader_options + tuple(options),
        )

    def slice(self, start: int, stop: int) -> QueryCollection:
        return self._derive(self.statement.slice(start, stop))

    def count_statement(self, strip: frozenset[str] = frozenset()) -> Select:
        statement = self.statement
        if STRIP_ORDER in strip:
            statement = statement.order_by(None)
        if STRIP_GROUP in strip:
            statement = statement.group_by(None)
        if STRIP_INCLUDES not in strip and self.loader_options:
            statement = statement.options(*self.loader_options)
        return select(func.count()).select_from(statement.distinct().subquery())

    def count(self, strip: frozenset[str] = frozenset()) -> int:
        return int(self.session.scalar(self.count_statement(strip)) or 0)

    def all(self) -> list[Any]:
        statement = self.statement
        if self.loader_options:
            statement = statement.options(*self.loader_options)
        result = self.session.scalars(statement)
        if self.loader_options:
            result = result.unique()
        return list(result.all())

    def __iter__(self) -> Iterator[Any]:
        return iter(self.all())

    def _derive(self, statement: Select) -> QueryCollection:
        return QueryCollection(self.session, statement, loader_options=self.loader_options)


def classify(obj: Any) -> CollectionKind:
    """Tell collections from single records without relying on type names."""

    if isinstance(obj, Queryable):
        return CollectionKind.DEFERRED
    if isinstance(obj, (str, bytes, bytearray, Mapping)):
        return CollectionKind.SINGLE
    if isinstance(obj, Sequence):
        return CollectionKind.MATERIALIZED
    return CollectionKind.SINGLE


def is_collection(obj: Any) -> bool:
    return classify(obj) is not CollectionKind.SINGLE
