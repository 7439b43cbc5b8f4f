# This file turns formatter results into JSON:API top-level documents.
# Page-link descriptors become absolute URLs built from the request URL, and the
# record count lands under the configured meta key.

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from jsonapi_utils.response.results import CollectionResult, ResultEnvelope
from jsonapi_utils.support.error_entries import ErrorEntry

JSONAPI_MEDIA_TYPE = "application/vnd.api+json"


def page_link(base_url: str, descriptor: Mapping[str, Any]) -> str:
    """Replace the `page[...]` query parameters of `base_url` with `descriptor`."""

    parts = urlsplit(base_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if not key.startswith("page[")
    ]
    query.extend((f"page[{key}]", str(value)) for key, value in descriptor.items())
    return urlunsplit(parts._replace(query=urlencode(query, safe="[]")))


def _serialize_resource(resource: Any, key_format: str) -> Any:
    if resource is None:
        return None
    serialize = getattr(resource, "serialize", None)
    if callable(serialize):
        return serialize(key_format)
    if isinstance(resource, Mapping):
        return dict(resource)
    return resource


def build_document(
    envelope: ResultEnvelope,
    *,
    base_url: str | None = None,
    key_format: str = "underscored",
    record_count_key: str = "record_count",
) -> dict[str, Any]:
    if not isinstance(envelope, CollectionResult):
        return {"data": _serialize_resource(envelope.resource, key_format)}

    document: dict[str, Any] = {
        "data": [_serialize_resource(resource, key_format) for resource in envelope.resources]
    }
    links = envelope.metadata.pagination_links
    if links and base_url:
        document["links"] = {rel: page_link(base_url, descriptor) for rel, descriptor in links.items()}
    if envelope.metadata.record_count is not None:
        document["meta"] = {record_count_key: envelope.metadata.record_count}
    return document


def build_errors_document(entries: Sequence[ErrorEntry]) -> dict[str, Any]:
    return {"errors": [entry.as_document() for entry in entries]}
