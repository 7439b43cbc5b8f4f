# This file runs a collection through filter, sort, paginate and map, in that order.
# Filtering and sorting must see the whole collection before a page is cut, and
# mapping runs last so resources are only built for the records on the final page.

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from jsonapi_utils.collection import is_collection
from jsonapi_utils.common.settings import JsonApiConfig
from jsonapi_utils.request import JsonApiRequest
from jsonapi_utils.support.cycle import ResponseCycle
from jsonapi_utils.support.pagination import PaginatorRegistry, apply_pagination, default_paginators

CollectionApplier = Callable[[Any, JsonApiRequest, "type | None"], Any]


def build_collection(
    collection: Any,
    cycle: ResponseCycle,
    *,
    request: JsonApiRequest,
    config: JsonApiConfig,
    mapper: Callable[[Any], Any],
    filter_applier: CollectionApplier,
    sort_applier: CollectionApplier,
    resource_class: type | None = None,
    paginators: PaginatorRegistry = default_paginators,
    paginate_option: bool | None = None,
) -> list[Any]:
    records = filter_applier(collection, request, resource_class)
    records = sort_applier(records, request, resource_class)
    records = apply_pagination(
        records,
        cycle,
        request=request,
        config=config,
        paginators=paginators,
        paginate_option=paginate_option,
    )
    if not is_collection(records):
        return []
    return [mapper(record) for record in records]
