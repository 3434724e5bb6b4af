# src/pulseboard/main.py
"""Main entry point for the Pulseboard application."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from pulseboard.api.v1 import (
    categories_router,
    notifications_router,
    posts_router,
    realtime_router,
    users_router,
)
from pulseboard.core.errors import Internal, PulseboardError
from pulseboard.core.settings import settings
from pulseboard.db.session import create_tables
from pulseboard.services.images import ImageStore
from pulseboard.services.presence import PresenceRegistry
from pulseboard.services.push import PushDispatcher

logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Pulseboard API",
    description="Posts, reactions, comments and live like notifications",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

# Add GZip middleware for compression
app.add_middleware(GZipMiddleware)

# Process-wide collaborators; handed to endpoints through dependencies.
app.state.presence = PresenceRegistry()
app.state.dispatcher = PushDispatcher(app.state.presence)
app.state.images = ImageStore()

# Include API routers
app.include_router(users_router, prefix="/api/v1")
app.include_router(posts_router, prefix="/api/v1")
app.include_router(categories_router, prefix="/api/v1")
app.include_router(notifications_router, prefix="/api/v1")
app.include_router(realtime_router)


@app.exception_handler(PulseboardError)
async def handle_domain_error(request: Request, exc: PulseboardError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies and parameters in the domain error shape."""
    data = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        data.append({"message": f"{location}: {error.get('msg')}" if location else error.get("msg")})
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder({"message": "Invalid input.", "data": data}),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    error = Internal()
    return JSONResponse(status_code=error.status_code, content=error.to_body())


@app.on_event("startup")
async def on_startup() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if settings.auto_create_tables:
        create_tables()
    await app.state.dispatcher.start()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await app.state.dispatcher.stop()


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("pulseboard.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
