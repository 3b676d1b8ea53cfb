"""
ASGI entry point of the portal server.

With ``INIT_MODE=runtime`` the lifespan creates missing tables and inserts the
demo accounts, notifications and agent catalog before the first request. Every
failure leaves the server as ``{"error": <message>}``: HTTP errors keep their
status, request validation becomes 400, constraint violations 409, anything
else 500.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from campus_portal.api.fast_api import router
from campus_portal.database.config.config import settings
from campus_portal.database.core.backup import init_tables, seed_database

logger = logging.getLogger("uvicorn")


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.INIT_MODE == "runtime":
        init_tables()
        inserted = seed_database()
        logger.info("Database ready (seeded: %s).", inserted)
    else:
        logger.info("Skipping runtime init (INIT_MODE=%s).", settings.INIT_MODE)
    yield
    logger.info("App shutting down.")


def create_app() -> FastAPI:
    """Build the portal application (routes, CORS, error rendering)."""
    app = FastAPI(lifespan=lifespan, title="Campus Portal API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],  # Frontend origin
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.exception_handler(HTTPException)
    async def http_error(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = ".".join(str(part) for part in errors[0]["loc"][1:]) if errors else ""
        message = errors[0]["msg"] if errors else "invalid request"
        return JSONResponse(status_code=400, content={"error": f"{field}: {message}" if field else message})

    @app.exception_handler(IntegrityError)
    async def integrity_error(request: Request, exc: IntegrityError):
        logger.warning("Constraint violation on %s: %s", request.url.path, exc.orig)
        return JSONResponse(status_code=409, content={"error": "constraint violation"})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(status_code=500, content={"error": str(exc) or exc.__class__.__name__})

    return app


app = create_app()
"""The ASGI application (`uvicorn campus_portal.main:app`)."""
