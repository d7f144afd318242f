"""
Main FastAPI application for the LEMS tournament backend.
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lems import __version__
from lems.core.config import CORS_ORIGINS, LOG_LEVEL
from lems.core.errors import LemsError
from lems.core.logging_config import setup_logging, get_logger
from lems.database import DocumentStore, create_store
from lems.services.notifier import Notifier
from lems.api import routes, websocket
from lems.api.routers import admin, events

logger = get_logger(__name__)


def create_app(store: Optional[DocumentStore] = None,
               notifier: Optional[Notifier] = None) -> FastAPI:
    """
    Build the application.

    Args:
        store: Document store; defaults to the backend selected by LEMS_STORE
        notifier: Real-time event hub shared by the routes and websockets
    """
    app = FastAPI(
        title="LEMS Tournament API",
        description="Event management backend for FIRST LEGO League tournaments",
        version=__version__
    )
    app.state.store = store if store is not None else create_store()
    app.state.notifier = notifier or Notifier()

    # Enable CORS for the frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(LemsError)
    async def lems_error_handler(request: Request, exc: LemsError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"loc": list(error.get("loc", [])), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]
        return JSONResponse(status_code=400, content={
            "ok": False,
            "error": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"errors": errors}
        })

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={
            "ok": False,
            "error": "INTERNAL_ERROR",
            "message": "Internal server error"
        })

    # Include API routes
    app.include_router(routes.router)
    app.include_router(admin.router)
    app.include_router(events.router)
    app.include_router(websocket.router)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "message": "LEMS Tournament API",
            "version": __version__,
            "endpoints": {
                "division": "/api/events/{divisionId}",
                "admin": "/api/admin",
                "websocket": "/ws/{divisionId}",
                "health": "/api/health"
            }
        }

    return app


setup_logging(getattr(logging, LOG_LEVEL.upper(), logging.INFO))
app = create_app()
