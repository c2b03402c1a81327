# recipebox/main.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from recipebox.clients.base import AIClient
from recipebox.clients.factory import build_ai_client
from recipebox.core import config
from recipebox.core.errors import ExtractionError
from recipebox.core.logging import setup_logging
from recipebox.core.middleware import RequestLoggingMiddleware
from recipebox.routers import health, recipes_generate, recipes_library, recipes_ops, shopping_list, speech
from recipebox.services import recipes_repo
from recipebox.services.pipeline import RecipePipeline

log = logging.getLogger(__name__)


async def extraction_error_handler(request: Request, exc: ExtractionError) -> JSONResponse:
    # code and cause go to the log; the caller only gets the message
    log.warning(
        "extraction error",
        extra={"code": exc.code.value, "source_url": exc.source_url, "cause": repr(exc.cause) if exc.cause else None},
    )
    return JSONResponse(status_code=exc.http_status, content={"error": exc.message})


def create_app(ai: Optional[AIClient] = None, http_client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    """
    Build the app. ``ai`` and ``http_client`` are normally built at startup
    from config; tests pass fakes in.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        recipes_repo.init_db()

        owns_http = http_client is None
        http = http_client or httpx.AsyncClient(
            timeout=config.TIMEOUT_FETCH_S,
            headers={"User-Agent": config.USER_AGENT},
        )
        ai_client = ai or build_ai_client()

        app.state.http = http
        app.state.ai = ai_client
        app.state.pipeline = RecipePipeline(ai_client, http)
        try:
            yield
        finally:
            if owns_http:
                await http.aclose()

    app = FastAPI(title="RecipeBox", version=config.APP_VERSION, lifespan=lifespan)
    app.include_router(recipes_generate.router)
    app.include_router(recipes_library.router)
    app.include_router(recipes_ops.router)
    app.include_router(shopping_list.router)
    app.include_router(speech.router)
    app.include_router(health.router)

    app.add_exception_handler(ExtractionError, extraction_error_handler)

    setup_logging()

    app.add_middleware(RequestLoggingMiddleware)

    return app


app = create_app()
