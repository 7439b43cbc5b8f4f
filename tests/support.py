# This file provides shared models, resources and stubs for formatter tests.
# It exists so every test module works against the same small SQLite schema.
# The stubs record how often collaborators are called, which lets tests check
# memoization and the count fallback without a real failing database.

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from sqlalchemy import ForeignKey, String, create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, relationship
from sqlalchemy.pool import StaticPool

from jsonapi_utils.collection import STRIP_INCLUDES
from jsonapi_utils.common.settings import JsonApiConfig
from jsonapi_utils.request import JsonApiRequest, PageParams
from jsonapi_utils.resources import Resource, ResourceRegistry


class Base(DeclarativeBase):
    pass


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    first_name: Mapped[str] = mapped_column(String(50))
    last_name: Mapped[str] = mapped_column(String(50))
    age: Mapped[int] = mapped_column()
    posts: Mapped[list[Post]] = relationship(back_populates="author")


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(100))
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"))
    author: Mapped[User] = relationship(back_populates="posts")


class UserResource(Resource):
    attributes = ("first_name", "last_name", "age")
    relationships = ("posts",)
    filters = ("first_name", "age")


class PostResource(Resource):
    attributes = ("title",)


class AdminUserResource(UserResource):
    type = "admins"


registry = ResourceRegistry()
registry.register(UserResource)
registry.register(PostResource)
registry.register(AdminUserResource, name="admin")

USER_ROWS: list[dict[str, Any]] = [
    {"id": 1, "first_name": "Tiago", "last_name": "Guedes", "age": 31},
    {"id": 2, "first_name": "Doug", "last_name": "Lemos", "age": 40},
    {"id": 3, "first_name": "Ana", "last_name": "Silva", "age": 25},
    {"id": 4, "first_name": "Bea", "last_name": "Souza", "age": 40},
    {"id": 5, "first_name": "Caio", "last_name": "Lima", "age": 19},
]


def build_engine() -> Engine:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine


def seed_users(session: Session) -> None:
    for row in USER_ROWS:
        user = User(**row)
        user.posts = [Post(title=f"post {row['id']}-{n}") for n in range(row["id"] % 3)]
        session.add(user)
    session.commit()


def build_test_config(**overrides: Any) -> JsonApiConfig:
    """Create deterministic formatter config for tests."""

    values: dict[str, Any] = {
        "default_paginator": "paged",
        "default_page_size": 2,
        "maximum_page_size": 5,
        "top_level_links_include_pagination": True,
        "top_level_meta_include_record_count": True,
    }
    values.update(overrides)
    return JsonApiConfig(**values)


def build_request(
    *,
    page: dict[str, Any] | None = None,
    filters: dict[str, str] | None = None,
    sort: str | None = None,
    resource_class: type | None = UserResource,
    base_url: str | None = "http://testserver/users",
) -> JsonApiRequest:
    return JsonApiRequest(
        page=PageParams(page or {}),
        filters=filters or {},
        sort=sort,
        resource_class=resource_class,
        base_url=base_url,
    )


class CountingQueryable:
    """Deferred collection stub that records every count request."""

    def __init__(
        self,
        records: list[Any],
        *,
        fail_when_stripping_includes: bool = False,
        always_fail: bool = False,
    ) -> None:
        self.records = list(records)
        self.fail_when_stripping_includes = fail_when_stripping_includes
        self.always_fail = always_fail
        self.count_calls: list[frozenset[str]] = []

    def column(self, name: str) -> Any | None:
        return None

    def where(self, *criteria: Any) -> CountingQueryable:
        return self

    def order_by(self, *clauses: Any) -> CountingQueryable:
        return self

    def slice(self, start: int, stop: int) -> CountingQueryable:
        sliced = CountingQueryable(self.records[start:stop])
        sliced.count_calls = self.count_calls
        return sliced

    def count(self, strip: frozenset[str] = frozenset()) -> int:
        self.count_calls.append(strip)
        if self.always_fail or (self.fail_when_stripping_includes and STRIP_INCLUDES in strip):
            raise OperationalError("SELECT count(*) FROM users", {}, Exception("misuse of aggregate"))
        return len(self.records)

    def all(self) -> list[Any]:
        return list(self.records)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.records)
