# This file provides shared helpers for FastAPI integration tests.
# It exists so tests can render formatter output through real routes and TestClient.
# The app wires the formatter dependency, renderers and error handlers the way a host
# service would, backed by the in-memory SQLite fixtures.

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import Depends, FastAPI, Query
from fastapi.testclient import TestClient
from sqlalchemy import select
from sqlalchemy.orm import Session

from jsonapi_utils.api.dependencies import formatter_dependency, get_formatter_config
from jsonapi_utils.api.app import install_jsonapi
from jsonapi_utils.api.renderers import render, render_errors
from jsonapi_utils.collection import QueryCollection
from jsonapi_utils.common.settings import JsonApiConfig
from jsonapi_utils.errors import JsonApiError, ResourceNotFoundError
from jsonapi_utils.response.formatter import ResponseFormatter
from jsonapi_utils.support.error_entries import ErrorEntry
from tests.support import User, UserResource, build_test_config, registry


class InvalidUser:
    def field_errors(self) -> dict[str, list[str]]:
        return {"first_name": ["can't be blank"]}


def build_app(session: Session) -> FastAPI:
    app = FastAPI()
    install_jsonapi(app)
    get_formatter = formatter_dependency(UserResource, registry=registry)

    @app.get("/users")
    def list_users(formatter: ResponseFormatter = Depends(get_formatter)) -> object:
        return render(formatter, QueryCollection(session, select(User)))

    @app.get("/users/{user_id}")
    def show_user(user_id: int, formatter: ResponseFormatter = Depends(get_formatter)) -> object:
        user = session.get(User, user_id)
        if user is None:
            raise ResourceNotFoundError(f"User {user_id} not found")
        return render(formatter, user)

    @app.post("/users")
    def create_user(formatter: ResponseFormatter = Depends(get_formatter)) -> object:
        return render_errors(formatter, InvalidUser())

    @app.get("/conflict")
    def conflict() -> object:
        raise JsonApiError(
            [ErrorEntry(title="Conflict", status="409"), {"title": "Conflict", "status": "409"}],
            status_code=409,
        )

    @app.get("/search")
    def search(limit: int = Query(...)) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/boom")
    def boom() -> object:
        raise RuntimeError("database password is hunter2")

    return app


@contextmanager
def api_test_client(session: Session, *, config: JsonApiConfig | None = None) -> Iterator[TestClient]:
    """Yield a TestClient with the formatter config pinned for the test."""

    app = build_app(session)
    resolved_config = config or build_test_config()
    app.dependency_overrides[get_formatter_config] = lambda: resolved_config
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client
