# This file renders formatter output as FastAPI responses.
# Handlers return `render(...)` or `render_errors(...)` directly; both produce JSON:API
# documents with the JSON:API media type.

from __future__ import annotations

from typing import Any

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from jsonapi_utils.response.document import JSONAPI_MEDIA_TYPE, build_document, build_errors_document
from jsonapi_utils.response.formatter import ResponseFormatter
from jsonapi_utils.support.error_entries import ErrorEntry


class JsonApiResponse(JSONResponse):
    media_type = JSONAPI_MEDIA_TYPE


def render(
    formatter: ResponseFormatter,
    obj: Any,
    *,
    status_code: int = 200,
    **options: Any,
) -> JsonApiResponse:
    envelope = formatter.format(obj, **options)
    document = build_document(
        envelope,
        base_url=formatter.request.base_url,
        key_format=formatter.config.json_key_format,
        record_count_key=formatter.config.top_level_meta_record_count_key,
    )
    return JsonApiResponse(content=jsonable_encoder(document), status_code=status_code)


def render_errors(
    formatter: ResponseFormatter,
    obj: Any,
    *,
    status_code: int = 422,
) -> JsonApiResponse:
    return errors_response(formatter.format_errors(obj), status_code=status_code)


def errors_response(entries: list[ErrorEntry], *, status_code: int) -> JsonApiResponse:
    return JsonApiResponse(content=jsonable_encoder(build_errors_document(entries)), status_code=status_code)
