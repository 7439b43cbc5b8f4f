# This file selects and applies the pagination strategy for collection responses.
# Built-in strategies are page-number and offset based; custom strategies plug in
# through the paginator registry and are never assumed to be numeric.
# Index ranges are half-open and out-of-range pages simply come back empty.

from __future__ import annotations

import logging
import math
from typing import Any, Protocol

from jsonapi_utils.collection import CollectionKind, classify
from jsonapi_utils.common.settings import JsonApiConfig
from jsonapi_utils.errors import UnknownPaginatorError
from jsonapi_utils.request import JsonApiRequest, PageParams
from jsonapi_utils.support.counting import record_count_for
from jsonapi_utils.support.cycle import ResponseCycle

LOGGER = logging.getLogger("jsonapi_utils.pagination")

NO_PAGINATION = "none"

LinkDescriptor = dict[str, dict[str, Any]]


class Paginator(Protocol):
    """Capabilities every pagination strategy provides."""

    def apply(self, collection: Any, context_hint: Any = None) -> Any: ...

    def pagination_range(self, page_params: PageParams) -> range: ...

    def links_page_params(self, record_count: int) -> LinkDescriptor: ...


def slice_collection(collection: Any, index_range: range) -> Any:
    """Cut `[start, stop)` out of a collection without changing its kind."""

    if classify(collection) is CollectionKind.DEFERRED:
        return collection.slice(index_range.start, index_range.stop)
    return collection[index_range.start : index_range.stop]


class PagedPaginator:
    """`page[number]` / `page[size]` pagination."""

    def __init__(self, page_params: PageParams, config: JsonApiConfig) -> None:
        self.config = config
        self.number, self.size = self._parse(page_params)

    def __repr__(self) -> str:
        return f"PagedPaginator(number={self.number}, size={self.size})"

    def _parse(self, page_params: PageParams) -> tuple[int, int]:
        number = page_params.positive_int("number") or 1
        size = page_params.positive_int("size") or self.config.default_page_size
        return number, size

    def pagination_range(self, page_params: PageParams) -> range:
        number, size = self._parse(page_params)
        return range((number - 1) * size, number * size)

    def apply(self, collection: Any, context_hint: Any = None) -> Any:
        return slice_collection(collection, range((self.number - 1) * self.size, self.number * self.size))

    def page_count(self, record_count: int) -> int:
        return math.ceil(record_count / self.size)

    def links_page_params(self, record_count: int) -> LinkDescriptor:
        page_count = self.page_count(record_count)
        links: LinkDescriptor = {"first": {"number": 1, "size": self.size}}
        if self.number > 1:
            links["prev"] = {"number": self.number - 1, "size": self.size}
        if self.number < page_count:
            links["next"] = {"number": self.number + 1, "size": self.size}
        links["last"] = {"number": max(page_count, 1), "size": self.size}
        return links


class OffsetPaginator:
    """`page[offset]` / `page[limit]` pagination."""

    def __init__(self, page_params: PageParams, config: JsonApiConfig) -> None:
        self.config = config
        self.offset, self.limit = self._parse(page_params)

    def __repr__(self) -> str:
        return f"OffsetPaginator(offset={self.offset}, limit={self.limit})"

    def _parse(self, page_params: PageParams) -> tuple[int, int]:
        offset = page_params.positive_int("offset") or 0
        limit = page_params.positive_int("limit") or self.config.default_page_size
        return offset, limit

    def pagination_range(self, page_params: PageParams) -> range:
        offset, limit = self._parse(page_params)
        return range(offset, offset + limit)

    def apply(self, collection: Any, context_hint: Any = None) -> Any:
        return slice_collection(collection, range(self.offset, self.offset + self.limit))

    def links_page_params(self, record_count: int) -> LinkDescriptor:
        links: LinkDescriptor = {"first": {"offset": 0, "limit": self.limit}}
        if self.offset > 0:
            links["prev"] = {"offset": max(self.offset - self.limit, 0), "limit": self.limit}
        next_offset = self.offset + self.limit
        if next_offset < record_count:
            links["next"] = {"offset": next_offset, "limit": self.limit}
        links["last"] = {"offset": max(record_count - self.limit, 0), "limit": self.limit}
        return links


class PaginatorRegistry:
    """Strategy name to paginator class table.

    Paginator classes are constructed with `(page_params, config)`.
    """

    def __init__(self) -> None:
        self._paginators: dict[str, type] = {
            "paged": PagedPaginator,
            "offset": OffsetPaginator,
        }

    def register(self, name: str, paginator_class: type) -> type:
        key = name.strip().lower()
        if key == NO_PAGINATION:
            raise ValueError(f"{NO_PAGINATION!r} is reserved and disables pagination")
        self._paginators[key] = paginator_class
        return paginator_class

    def resolve(self, name: str) -> type:
        try:
            return self._paginators[name]
        except KeyError:
            raise UnknownPaginatorError(f"No paginator registered under {name!r}") from None


default_paginators = PaginatorRegistry()


def paginate(
    collection: Any,
    page_params: PageParams,
    strategy: str,
    *,
    config: JsonApiConfig,
    record_count: int | None = None,
    paginators: PaginatorRegistry = default_paginators,
) -> tuple[Any, LinkDescriptor | None]:
    """Apply one strategy to a collection and describe its page links.

    Links are only produced when the configuration asks for them and the
    total record count is known.
    """

    if strategy == NO_PAGINATION:
        return collection, None

    paginator = paginators.resolve(strategy)(page_params, config)
    kind = classify(collection)
    if kind is CollectionKind.SINGLE:
        paged = collection
    elif kind is CollectionKind.MATERIALIZED:
        paged = slice_collection(collection, paginator.pagination_range(page_params))
    else:
        paged = paginator.apply(collection, None)

    links = None
    if config.top_level_links_include_pagination and record_count is not None:
        links = paginator.links_page_params(record_count)
    return paged, links


def should_paginate(config: JsonApiConfig, paginate_option: bool | None) -> bool:
    return config.pagination_enabled and (paginate_option is None or bool(paginate_option))


def paginator_for(
    cycle: ResponseCycle,
    *,
    request: JsonApiRequest,
    config: JsonApiConfig,
    paginators: PaginatorRegistry = default_paginators,
) -> Any:
    if cycle.paginator is None:
        paginator_class = paginators.resolve(config.default_paginator)
        cycle.paginator = paginator_class(request.page, config)
        LOGGER.debug("selected paginator=%r", cycle.paginator)
    return cycle.paginator


def apply_pagination(
    collection: Any,
    cycle: ResponseCycle,
    *,
    request: JsonApiRequest,
    config: JsonApiConfig,
    paginators: PaginatorRegistry = default_paginators,
    paginate_option: bool | None = None,
) -> Any:
    """Page the collection with the configured strategy, if pagination applies."""

    if not should_paginate(config, paginate_option):
        return collection

    kind = classify(collection)
    if kind is CollectionKind.SINGLE:
        return collection

    paginator = paginator_for(cycle, request=request, config=config, paginators=paginators)
    if kind is CollectionKind.MATERIALIZED:
        if cycle.pagination is None:
            cycle.pagination = paginator.pagination_range(request.page)
        return slice_collection(collection, cycle.pagination)
    return paginator.apply(collection, None)


def pagination_params(
    collection: Any,
    cycle: ResponseCycle,
    *,
    request: JsonApiRequest,
    config: JsonApiConfig,
    paginators: PaginatorRegistry = default_paginators,
    **count_kwargs: Any,
) -> LinkDescriptor:
    """Page-link descriptor for the current request, e.g. `{"first": {"number": 1, "size": 2}}`."""

    if not config.top_level_links_include_pagination:
        return {}
    paginator = paginator_for(cycle, request=request, config=config, paginators=paginators)
    record_count = record_count_for(cycle, collection, request=request, **count_kwargs)
    return paginator.links_page_params(record_count)
