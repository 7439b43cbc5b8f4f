# This file attaches JSON:API behavior to a host FastAPI application.
# It exists so services configure logging and error documents in one call at startup.

from __future__ import annotations

import logging

from fastapi import FastAPI

from jsonapi_utils.api.error_handlers import register_error_handlers
from jsonapi_utils.common.logging import configure_logging
from jsonapi_utils.common.settings import get_config

LOGGER = logging.getLogger("jsonapi_utils.api")


def install_jsonapi(app: FastAPI) -> FastAPI:
    """Configure logging and register JSON:API error handlers on `app`."""

    configure_logging()
    register_error_handlers(app)
    config = get_config()
    LOGGER.info(
        "jsonapi formatting installed paginator=%s page_size=%s max_page_size=%s",
        config.default_paginator,
        config.default_page_size,
        config.maximum_page_size,
    )
    return app
