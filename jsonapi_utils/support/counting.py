# This file counts the records behind a collection response.
# Counting a deferred query can be expensive, so the result is memoized per response
# cycle and shared by the record-count meta and the pagination links.
# Query counts strip directives that break or slow down COUNT, with one narrower retry.

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from jsonapi_utils.collection import (
    STRIP_GROUP,
    STRIP_INCLUDES,
    STRIP_ORDER,
    CollectionKind,
    Queryable,
    classify,
)
from jsonapi_utils.errors import CountQueryError, UncountableCollectionError
from jsonapi_utils.request import JsonApiRequest
from jsonapi_utils.support.cycle import ResponseCycle

LOGGER = logging.getLogger("jsonapi_utils.counting")

FIRST_ATTEMPT_STRIP = frozenset({STRIP_INCLUDES, STRIP_GROUP, STRIP_ORDER})
# Some SQL dialects reject the count once eager loading is removed while grouping
# or ordering is still referenced, so the retry leaves eager loading in place.
FALLBACK_STRIP = frozenset({STRIP_GROUP, STRIP_ORDER})

FilterApplier = Callable[[Any, JsonApiRequest, "type | None"], Any]


@dataclass(frozen=True)
class CountAttempt:
    value: int | None = None
    error: SQLAlchemyError | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def attempt_count(collection: Queryable, strip: frozenset[str]) -> CountAttempt:
    try:
        return CountAttempt(value=collection.count(strip))
    except SQLAlchemyError as exc:
        return CountAttempt(error=exc)


def count_query(collection: Queryable) -> int:
    """Count distinct rows of a deferred collection, retrying once on failure."""

    first = attempt_count(collection, FIRST_ATTEMPT_STRIP)
    if first.succeeded:
        return int(first.value or 0)

    LOGGER.warning("count query failed, retrying without stripping includes error=%s", first.error)
    retry = attempt_count(collection, FALLBACK_STRIP)
    if retry.succeeded:
        return int(retry.value or 0)
    raise CountQueryError(f"Could not count records: {retry.error}") from retry.error


def is_count_override(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def count_records(
    collection: Any,
    *,
    request: JsonApiRequest,
    resource_class: type | None = None,
    override: Any = None,
    filter_applier: FilterApplier | None = None,
) -> int:
    """Number of records the collection holds once request filters are applied."""

    if is_count_override(override):
        return int(override)

    kind = classify(collection)
    if kind is CollectionKind.SINGLE:
        raise UncountableCollectionError(collection)

    if filter_applier is not None and request.has_filters:
        collection = filter_applier(collection, request, resource_class)

    if kind is CollectionKind.MATERIALIZED:
        return len(collection)
    return count_query(collection)


def record_count_for(cycle: ResponseCycle, collection: Any, **kwargs: Any) -> int:
    """Memoized `count_records` for the current response cycle."""

    if cycle.record_count is None:
        cycle.record_count = count_records(collection, **kwargs)
    return cycle.record_count
