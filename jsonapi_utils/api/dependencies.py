# This file provides FastAPI dependency factories for request-scoped formatting.
# Each request gets its own JsonApiRequest and ResponseFormatter, built from the
# query string and the process-wide configuration.

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from fastapi import Depends, Request

from jsonapi_utils.common.settings import JsonApiConfig, get_config
from jsonapi_utils.errors import JsonApiError
from jsonapi_utils.request import JsonApiRequest, PageParams
from jsonapi_utils.response.formatter import ResponseFormatter


PAGE_SIZE_KEYS = ("size", "limit")


def get_formatter_config() -> JsonApiConfig:
    return get_config()


def check_page_size(page: PageParams, config: JsonApiConfig) -> None:
    """Reject `page[size]` or `page[limit]` values above the configured maximum."""

    errors = []
    for key in PAGE_SIZE_KEYS:
        value = page.positive_int(key)
        if value is not None and value > config.maximum_page_size:
            errors.append(
                {
                    "status": "400",
                    "code": "400",
                    "title": "Invalid page parameter",
                    "detail": f"page[{key}] must not exceed {config.maximum_page_size}",
                    "source": {"parameter": f"page[{key}]"},
                }
            )
    if errors:
        raise JsonApiError(errors, status_code=400)


def jsonapi_request_dependency(
    resource_class: type | None = None,
    *,
    context_factory: Callable[[Request], Any] | None = None,
) -> Callable[..., JsonApiRequest]:
    def dependency(
        request: Request,
        config: JsonApiConfig = Depends(get_formatter_config),
    ) -> JsonApiRequest:
        jsonapi_request = JsonApiRequest.from_query_params(
            request.query_params.multi_items(),
            resource_class=resource_class,
            context=context_factory(request) if context_factory else None,
            base_url=str(request.url),
        )
        check_page_size(jsonapi_request.page, config)
        return jsonapi_request

    return dependency


def formatter_dependency(
    resource_class: type | None = None,
    **formatter_kwargs: Any,
) -> Callable[..., ResponseFormatter]:
    request_dependency = jsonapi_request_dependency(resource_class)

    def dependency(
        jsonapi_request: JsonApiRequest = Depends(request_dependency),
        config: JsonApiConfig = Depends(get_formatter_config),
    ) -> ResponseFormatter:
        return ResponseFormatter(jsonapi_request, config=config, **formatter_kwargs)

    return dependency
