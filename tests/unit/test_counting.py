"""
Unit tests for record counting.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, selectinload

from jsonapi_utils.collection import QueryCollection
from jsonapi_utils.errors import CountQueryError, RecordCountError, UncountableCollectionError
from jsonapi_utils.support.counting import (
    FALLBACK_STRIP,
    FIRST_ATTEMPT_STRIP,
    count_records,
    record_count_for,
)
from jsonapi_utils.support.cycle import ResponseCycle
from jsonapi_utils.support.filtering import apply_filter
from tests.support import USER_ROWS, CountingQueryable, Post, User, UserResource, build_request


def test_numeric_override_skips_collection_access() -> None:
    stub = CountingQueryable([], always_fail=True)

    assert count_records(stub, request=build_request(), override=100) == 100
    assert count_records(object(), request=build_request(), override=7.9) == 7
    assert stub.count_calls == []


def test_non_numeric_override_is_ignored() -> None:
    assert count_records([1, 2, 3], request=build_request(), override="100") == 3
    assert count_records([1, 2, 3], request=build_request(), override=True) == 3


def test_materialized_collection_counts_its_length() -> None:
    assert count_records(list(USER_ROWS), request=build_request()) == 5


def test_materialized_count_reflects_request_filters() -> None:
    request = build_request(filters={"age": "40"})

    count = count_records(
        list(USER_ROWS),
        request=request,
        resource_class=UserResource,
        filter_applier=apply_filter,
    )

    assert count == 2


def test_uncountable_collection_raises() -> None:
    with pytest.raises(UncountableCollectionError) as excinfo:
        count_records({"id": 1}, request=build_request())

    assert isinstance(excinfo.value, RecordCountError)
    assert excinfo.value.collection_type == "dict"


def test_query_count_ignores_eager_loading_order_and_joins(session: Session) -> None:
    users = (
        QueryCollection(session, select(User).join(User.posts).order_by(User.age.desc()))
        .includes(selectinload(User.posts))
    )

    assert count_records(users, request=build_request()) == 4


def test_grouping_is_stripped_on_both_count_attempts(session: Session) -> None:
    users = QueryCollection(session, select(User).join(User.posts)).group_by(User.id).order_by(User.age)

    assert "GROUP BY" in str(users.count_statement())
    for strip in (FIRST_ATTEMPT_STRIP, FALLBACK_STRIP):
        compiled = str(users.count_statement(strip))
        assert "GROUP BY" not in compiled
        assert "ORDER BY" not in compiled
        assert users.count(strip) == 4
    assert count_records(users, request=build_request()) == 4


def test_query_count_applies_request_filters(session: Session) -> None:
    users = QueryCollection(session, select(User))
    request = build_request(filters={"first_name": "Tiago,Ana"})

    count = count_records(users, request=request, resource_class=UserResource, filter_applier=apply_filter)

    assert count == 2


def test_count_retries_without_stripping_includes() -> None:
    stub = CountingQueryable([1, 2, 3], fail_when_stripping_includes=True)

    assert count_records(stub, request=build_request()) == 3
    assert stub.count_calls == [FIRST_ATTEMPT_STRIP, FALLBACK_STRIP]


def test_count_raises_when_retry_also_fails() -> None:
    stub = CountingQueryable([1, 2, 3], always_fail=True)

    with pytest.raises(CountQueryError) as excinfo:
        count_records(stub, request=build_request())

    assert isinstance(excinfo.value.__cause__, OperationalError)
    assert len(stub.count_calls) == 2


def test_record_count_is_memoized_per_cycle() -> None:
    stub = CountingQueryable([1, 2, 3, 4])
    cycle = ResponseCycle()

    first = record_count_for(cycle, stub, request=build_request())
    second = record_count_for(cycle, stub, request=build_request())

    assert first == second == 4
    assert stub.count_calls == [FIRST_ATTEMPT_STRIP]


def test_new_cycle_counts_again() -> None:
    stub = CountingQueryable([1, 2])

    record_count_for(ResponseCycle(), stub, request=build_request())
    record_count_for(ResponseCycle(), stub, request=build_request())

    assert len(stub.count_calls) == 2


def test_posts_query_counts_distinct_rows(session: Session) -> None:
    posts = QueryCollection(session, select(Post).join(Post.author).where(User.age == 40))

    assert count_records(posts, request=build_request()) == 3
