# This file builds JSON:API results from domain records and error payloads.
# It exists so request handlers can hand over a record, a list, a query or a raw
# keyed payload and get back the page of resources plus links and count metadata.
# Every call gets its own ResponseCycle; the formatter itself holds no per-call state.

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from jsonapi_utils.collection import is_collection
from jsonapi_utils.common.settings import JsonApiConfig, get_config
from jsonapi_utils.errors import ResourceNotFoundError
from jsonapi_utils.models import as_model_factory, convert_raw_records
from jsonapi_utils.request import JsonApiRequest
from jsonapi_utils.resources import ResourceRegistry, ResourceSelector, default_registry
from jsonapi_utils.response.pipeline import CollectionApplier, build_collection
from jsonapi_utils.response.results import (
    CollectionMetadata,
    CollectionResult,
    ResultEnvelope,
    SingleResult,
)
from jsonapi_utils.support.counting import record_count_for
from jsonapi_utils.support.cycle import ResponseCycle
from jsonapi_utils.support.error_entries import (
    ErrorEntry,
    ModelErrors,
    dedupe_errors,
    has_model_errors,
    sanitize_errors,
    unwrap_errors,
)
from jsonapi_utils.support.filtering import apply_filter, apply_sort
from jsonapi_utils.support.pagination import PaginatorRegistry, default_paginators, pagination_params


@dataclass(frozen=True)
class FormatOptions:
    """Per-call options.

    resource: resource class, registry key, or a callable returning either for a record.
    model: model factory (or mapped class) used to build records from keyed payloads.
    count: total record count to report instead of counting the collection.
    paginate: set to False to skip pagination and collection metadata.
    """

    resource: ResourceSelector | None = None
    model: Any = None
    count: Any = None
    paginate: bool | None = None


class ResponseFormatter:
    """Formats records and errors for one request."""

    def __init__(
        self,
        request: JsonApiRequest,
        *,
        config: JsonApiConfig | None = None,
        registry: ResourceRegistry = default_registry,
        paginators: PaginatorRegistry = default_paginators,
        filter_applier: CollectionApplier = apply_filter,
        sort_applier: CollectionApplier = apply_sort,
        session: Session | None = None,
    ) -> None:
        self.request = request
        self.config = config or get_config()
        self.registry = registry
        self.paginators = paginators
        self.filter_applier = filter_applier
        self.sort_applier = sort_applier
        self.session = session

    def format(
        self,
        obj: Any,
        *,
        resource: ResourceSelector | None = None,
        model: Any = None,
        count: Any = None,
        paginate: bool | None = None,
    ) -> ResultEnvelope:
        """Build the result for a record, a collection, or a `{"data": ...}` payload.

        e.g.: formatter.format(session.get(User, 1))
              formatter.format(QueryCollection(session, select(User)), count=100)
              formatter.format({"data": {"id": 1, "name": "Tiago"}}, model=User)
        """

        options = FormatOptions(resource=resource, model=model, count=count, paginate=paginate)
        if isinstance(obj, Mapping):
            factory = as_model_factory(options.model, self.session)
            obj = convert_raw_records(obj.get("data"), factory)

        cycle = ResponseCycle()
        if is_collection(obj):
            resource_class = self._collection_resource_class(options)
            resources = build_collection(
                obj,
                cycle,
                request=self.request,
                config=self.config,
                mapper=lambda record: self.turn_into_resource(record, options),
                filter_applier=self.filter_applier,
                sort_applier=self.sort_applier,
                resource_class=resource_class,
                paginators=self.paginators,
                paginate_option=options.paginate,
            )
            metadata = self._collection_metadata(obj, cycle, options, resource_class)
            return CollectionResult(resources=tuple(resources), metadata=metadata)

        if obj is None:
            return SingleResult(resource=None)
        return SingleResult(resource=self.turn_into_resource(obj, options))

    serialize = format

    def format_errors(self, obj: Any) -> list[ErrorEntry]:
        """Error entries for a record with validation failures or any error collection."""

        if has_model_errors(obj):
            obj = ModelErrors(obj, self.request.resource_class, self.config.json_key_format)
        return dedupe_errors(sanitize_errors(unwrap_errors(obj)))

    serialize_errors = format_errors

    def turn_into_resource(self, record: Any, options: FormatOptions) -> Any:
        selector = options.resource
        if selector is None:
            resource_class = self.request.resource_class
            if resource_class is None:
                raise ResourceNotFoundError("No resource class given and none set on the request")
        else:
            if not isinstance(selector, (type, str)) and callable(selector):
                selector = selector(record)
            resource_class = self.registry.resolve(selector)
        return resource_class(record, self.request.context)

    def _collection_resource_class(self, options: FormatOptions) -> type | None:
        if isinstance(options.resource, (type, str)):
            return self.registry.resolve(options.resource)
        return self.request.resource_class

    def _collection_metadata(
        self,
        collection: Any,
        cycle: ResponseCycle,
        options: FormatOptions,
        resource_class: type | None,
    ) -> CollectionMetadata:
        if options.paginate is False:
            return CollectionMetadata()

        count_kwargs: dict[str, Any] = {
            "resource_class": resource_class,
            "override": options.count,
            "filter_applier": self.filter_applier,
        }
        links = None
        if self.config.pagination_enabled and self.config.top_level_links_include_pagination:
            links = pagination_params(
                collection,
                cycle,
                request=self.request,
                config=self.config,
                paginators=self.paginators,
                **count_kwargs,
            )

        record_count = None
        if self.config.top_level_meta_include_record_count:
            record_count = record_count_for(cycle, collection, request=self.request, **count_kwargs)

        return CollectionMetadata(pagination_links=links, record_count=record_count)
