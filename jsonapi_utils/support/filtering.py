# This file applies request filters and sort order to a logical collection.
# Both appliers accept in-memory sequences and deferred queries and return the same
# kind they were given, so they compose with pagination in either order of calls.
# Only fields the resource declares are honored; anything else is ignored.

from __future__ import annotations

import logging
from typing import Any

from jsonapi_utils.collection import CollectionKind, classify
from jsonapi_utils.request import JsonApiRequest
from jsonapi_utils.resources import read_field

LOGGER = logging.getLogger("jsonapi_utils.filtering")


def parse_filter_values(raw: Any) -> list[str]:
    return [value.strip() for value in str(raw).split(",") if value.strip()]


def parse_sort_fields(raw: str | None) -> list[tuple[str, bool]]:
    """Parse `-created_at,name` into `[("created_at", True), ("name", False)]`."""

    fields: list[tuple[str, bool]] = []
    for token in (raw or "").split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        fields.append((token.lstrip("+-"), descending))
    return fields


def _requested_filters(request: JsonApiRequest, resource_class: type | None) -> list[tuple[str, list[str]]]:
    allowed = set(getattr(resource_class, "filters", ()) or ())
    criteria: list[tuple[str, list[str]]] = []
    for field_name, raw in request.filters.items():
        values = parse_filter_values(raw)
        if not values:
            continue
        if field_name not in allowed:
            LOGGER.debug("ignoring filter on undeclared field=%s", field_name)
            continue
        criteria.append((field_name, values))
    return criteria


def apply_filter(collection: Any, request: JsonApiRequest, resource_class: type | None = None) -> Any:
    criteria = _requested_filters(request, resource_class)
    if not criteria:
        return collection

    kind = classify(collection)
    if kind is CollectionKind.DEFERRED:
        for field_name, values in criteria:
            column = collection.column(field_name)
            if column is None:
                LOGGER.debug("ignoring filter on unmapped column=%s", field_name)
                continue
            collection = collection.where(column.in_(values))
        return collection
    if kind is CollectionKind.MATERIALIZED:
        return [
            record
            for record in collection
            if all(str(read_field(record, name)) in values for name, values in criteria)
        ]
    return collection


def _sort_key(value: Any) -> tuple[bool, Any]:
    return (value is None, value)


def apply_sort(collection: Any, request: JsonApiRequest, resource_class: type | None = None) -> Any:
    requested = parse_sort_fields(request.sort)
    if not requested:
        return collection

    allowed_fields = getattr(resource_class, "allowed_sort_fields", None)
    allowed = set(allowed_fields() if callable(allowed_fields) else ())
    criteria = []
    for field_name, descending in requested:
        if field_name not in allowed:
            LOGGER.debug("ignoring sort on undeclared field=%s", field_name)
            continue
        criteria.append((field_name, descending))
    if not criteria:
        return collection

    kind = classify(collection)
    if kind is CollectionKind.DEFERRED:
        clauses = []
        for field_name, descending in criteria:
            column = collection.column(field_name)
            if column is not None:
                clauses.append(column.desc() if descending else column.asc())
        return collection.order_by(*clauses) if clauses else collection
    if kind is CollectionKind.MATERIALIZED:
        records = list(collection)
        # Stable sorts applied from the least significant key upwards.
        for field_name, descending in reversed(criteria):
            records.sort(key=lambda record: _sort_key(read_field(record, field_name)), reverse=descending)
        return records
    return collection
