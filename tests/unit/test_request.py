"""
Unit tests for request parameter parsing.
It asserts expected behavior and guards against regressions in the corresponding component.
These tests are executed by `pytest` locally and in CI and should remain deterministic.
"""

from __future__ import annotations

import pytest

from jsonapi_utils.collection import CollectionKind, classify
from jsonapi_utils.request import JsonApiRequest, PageParams
from tests.support import CountingQueryable


def test_from_query_params_groups_bracketed_keys() -> None:
    request = JsonApiRequest.from_query_params(
        [
            ("page[number]", "2"),
            ("page[size]", "5"),
            ("filter[first_name]", "Tiago,Doug"),
            ("sort", "-age"),
            ("include", "posts"),
        ],
        base_url="http://testserver/users",
    )

    assert request.page == PageParams({"number": "2", "size": "5"})
    assert request.filters == {"first_name": "Tiago,Doug"}
    assert request.sort == "-age"
    assert request.has_filters is True


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("3", 3), (" 4 ", 4), (7, 7), ("0", None), ("-1", None), ("x", None), (None, None), (True, None)],
)
def test_positive_int_treats_invalid_values_as_absent(raw: object, expected: int | None) -> None:
    assert PageParams({"size": raw}).positive_int("size") == expected


def test_blank_filters_do_not_count_as_filters() -> None:
    assert JsonApiRequest(filters={"first_name": "  "}).has_filters is False


@pytest.mark.parametrize(
    ("obj", "kind"),
    [
        ([1, 2], CollectionKind.MATERIALIZED),
        ((1, 2), CollectionKind.MATERIALIZED),
        (CountingQueryable([]), CollectionKind.DEFERRED),
        ({"id": 1}, CollectionKind.SINGLE),
        ("text", CollectionKind.SINGLE),
        (object(), CollectionKind.SINGLE),
    ],
)
def test_classify_detects_collections_by_capability(obj: object, kind: CollectionKind) -> None:
    assert classify(obj) is kind
