# This file defines the exception types raised while formatting responses.
# Counting and record conversion have local fallbacks; everything else propagates
# to the request handler, which renders it through the registered error handlers.

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from jsonapi_utils.support.error_entries import ErrorEntry


class JsonApiUtilsError(Exception):
    """Base class for formatter failures."""


class RecordCountError(JsonApiUtilsError, ValueError):
    """Raised when the number of records in a collection cannot be determined."""


class UncountableCollectionError(RecordCountError):
    """The collection is neither an override, an in-memory sequence, nor a query."""

    def __init__(self, collection: Any) -> None:
        self.collection_type = type(collection).__name__
        super().__init__(f"Can't count records of type {self.collection_type!r} with the given options")


class CountQueryError(RecordCountError):
    """Both count attempts against a deferred collection failed."""


class RecordConversionError(JsonApiUtilsError):
    """A raw keyed record carries fields the target model does not define."""

    def __init__(self, model_name: str, unknown_fields: Sequence[str]) -> None:
        self.model_name = model_name
        self.unknown_fields = tuple(unknown_fields)
        fields = ", ".join(self.unknown_fields)
        super().__init__(f"Unknown attribute(s) for {model_name}: {fields}")


class ResourceNotFoundError(JsonApiUtilsError, LookupError):
    """No resource class could be resolved for a record."""


class UnknownPaginatorError(JsonApiUtilsError, LookupError):
    """The configured pagination strategy is not registered."""


class JsonApiError(Exception):
    """Error carrying JSON:API error objects and the HTTP status to render them with."""

    def __init__(
        self,
        errors: Sequence[ErrorEntry | Mapping[str, Any]],
        *,
        status_code: int = 400,
    ) -> None:
        self.errors = list(errors)
        self.status_code = status_code
        super().__init__(f"{len(self.errors)} JSON:API error(s)")
