"""Format records, collections and errors into JSON:API results."""

from jsonapi_utils.collection import QueryCollection
from jsonapi_utils.common.settings import JsonApiConfig, get_config, load_config
from jsonapi_utils.errors import (
    CountQueryError,
    JsonApiError,
    RecordConversionError,
    RecordCountError,
    ResourceNotFoundError,
    UncountableCollectionError,
    UnknownPaginatorError,
)
from jsonapi_utils.models import SQLAlchemyModelFactory
from jsonapi_utils.request import JsonApiRequest, PageParams
from jsonapi_utils.resources import Resource, ResourceRegistry, default_registry
from jsonapi_utils.response.formatter import ResponseFormatter
from jsonapi_utils.response.results import CollectionMetadata, CollectionResult, SingleResult
from jsonapi_utils.support.error_entries import ErrorEntry
from jsonapi_utils.support.pagination import (
    OffsetPaginator,
    PagedPaginator,
    PaginatorRegistry,
    default_paginators,
    paginate,
)

__all__ = [
    "CollectionMetadata",
    "CollectionResult",
    "CountQueryError",
    "ErrorEntry",
    "JsonApiConfig",
    "JsonApiError",
    "JsonApiRequest",
    "OffsetPaginator",
    "PageParams",
    "PagedPaginator",
    "PaginatorRegistry",
    "QueryCollection",
    "RecordConversionError",
    "RecordCountError",
    "Resource",
    "ResourceNotFoundError",
    "ResourceRegistry",
    "ResponseFormatter",
    "SQLAlchemyModelFactory",
    "SingleResult",
    "UncountableCollectionError",
    "UnknownPaginatorError",
    "default_paginators",
    "default_registry",
    "get_config",
    "load_config",
    "paginate",
]
