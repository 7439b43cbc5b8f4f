"""
Shared test configuration.
It provides a deterministic environment and an in-memory SQLite session seeded with users.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

ROOT_DIR = Path(__file__).resolve().parent.parent
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from jsonapi_utils.common import settings as settings_module  # noqa: E402
from tests.support import build_engine, seed_users  # noqa: E402


@pytest.fixture(autouse=True)
def base_test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Pin formatter configuration so a developer `.env` never leaks into tests."""

    defaults = {
        "JSONAPI_DEFAULT_PAGINATOR": "paged",
        "JSONAPI_DEFAULT_PAGE_SIZE": "2",
        "JSONAPI_MAXIMUM_PAGE_SIZE": "5",
        "JSONAPI_TOP_LEVEL_LINKS_INCLUDE_PAGINATION": "true",
        "JSONAPI_TOP_LEVEL_META_INCLUDE_RECORD_COUNT": "true",
        "LOG_LEVEL": "INFO",
    }
    for key, value in defaults.items():
        monkeypatch.setenv(key, value)

    settings_module.get_config.cache_clear()
    yield
    settings_module.get_config.cache_clear()


@pytest.fixture()
def session() -> Iterator[Session]:
    engine = build_engine()
    with Session(engine) as db_session:
        seed_users(db_session)
        yield db_session
    engine.dispose()
