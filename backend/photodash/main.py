"""
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from photodash.api import records, upload
from photodash.config.settings import (
    DEFAULT_CORS_ORIGINS, Settings, cors_origins_from_env, load_settings
)
from photodash.services.baserow_client import BaserowClient

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render every HTTP error as a single `error` string."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Unexpected error"})


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None
) -> FastAPI:
    """
    Build the application.

    Settings are validated once, when the app starts; a missing Baserow
    variable stops startup instead of failing individual requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        resolved = settings or load_settings()
        logging.basicConfig(level=resolved.log_level.upper(), format=LOG_FORMAT)
        app.state.settings = resolved
        app.state.baserow = BaserowClient(resolved, transport=transport)
        logger.info("Serving Baserow table %s from %s", resolved.table_id, resolved.base_url)
        try:
            yield
        finally:
            await app.state.baserow.aclose()

    app = FastAPI(
        title="Shipment Photo Dashboard",
        description="Lists Baserow shipment records and attaches photos to them",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Middleware is fixed before startup, so origins cannot wait for load_settings()
    if settings:
        cors_origins = settings.cors_origins
    else:
        load_dotenv()
        cors_origins = cors_origins_from_env() or DEFAULT_CORS_ORIGINS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Include routers
    app.include_router(records.router, prefix="/api/records", tags=["records"])
    app.include_router(upload.router, prefix="/api/upload", tags=["upload"])

    @app.get("/")
    async def root():
        return {"message": "Shipment Photo Dashboard API"}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
