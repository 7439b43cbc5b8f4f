# This file registers exception handlers that answer with JSON:API error documents.
# Handlers translate formatter, validation and unexpected failures into safe
# client messages so stack traces never reach the response body.

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from jsonapi_utils.api.renderers import errors_response
from jsonapi_utils.errors import JsonApiError, ResourceNotFoundError
from jsonapi_utils.support.error_entries import ErrorEntry, dedupe_errors, sanitize_errors

LOGGER = logging.getLogger("jsonapi_utils.api")


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(JsonApiError)
    async def jsonapi_error_handler(_: Request, exc: JsonApiError) -> JSONResponse:
        entries = dedupe_errors(sanitize_errors(exc.errors))
        return errors_response(entries, status_code=exc.status_code)

    @app.exception_handler(ResourceNotFoundError)
    async def resource_not_found_handler(_: Request, exc: ResourceNotFoundError) -> JSONResponse:
        entry = ErrorEntry(status="404", code="404", title="Record not found", detail=str(exc))
        return errors_response([entry], status_code=404)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
        entries = []
        for error in exc.errors():
            location = [str(part) for part in error.get("loc", ())]
            entries.append(
                ErrorEntry(
                    status="400",
                    code="400",
                    title="Invalid request parameter",
                    detail=str(error.get("msg", "")),
                    source={"parameter": location[-1]} if location else None,
                )
            )
        return errors_response(dedupe_errors(entries), status_code=400)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        LOGGER.exception("unhandled error path=%s", request.url.path, exc_info=exc)
        entry = ErrorEntry(
            status="500",
            code="500",
            title="Internal Server Error",
            detail="Internal Server Error",
        )
        return errors_response([entry], status_code=500)
