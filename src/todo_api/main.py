from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy.exc import SQLAlchemyError

from .db import init_db, make_session_factory, try_create_db_engine
from .routers import auth as auth_router
from .routers import todos as todos_router
from .settings import Settings, get_settings

logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "health", "description": "Service liveness probe."},
    {"name": "todos", "description": "Create and list Todo items; one listing requires a bearer token."},
    {"name": "auth", "description": "Bearer token issuance for the demo user."},
]


# PUBLIC_INTERFACE
def configure_logging(level: str = "INFO") -> None:
    """Send log records to stdout with timestamps and logger names."""
    logging.basicConfig(
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Schema creation runs once; a failure is logged and the app still serves requests.
    engine = app.state.engine
    if engine is not None:
        init_db(engine)
    yield
    if engine is not None:
        engine.dispose()


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    The settings object is read once here and stored on app.state; the database
    provider is chosen from its connection string at this point and never
    re-evaluated per request.
    """
    settings = settings or get_settings()
    if settings.uses_default_jwt_key:
        logger.warning("JWT_KEY is not set; using the built-in development signing key")

    app = FastAPI(
        title="Todo API",
        description="Minimal Todo service with JWT bearer authentication and automatic database selection.",
        version="0.1.0",
        openapi_tags=openapi_tags,
        lifespan=lifespan,
    )

    engine = try_create_db_engine(settings)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = make_session_factory(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        """
        Return a consistent JSON structure for request validation errors.

        Response format:
            {
                "error": "ValidationError",
                "detail": [... pydantic/fastapi error details ...],
                "message": "Request validation failed"
            }
        """
        return JSONResponse(
            status_code=422,
            content={
                "error": "ValidationError",
                "message": "Request validation failed",
                "detail": exc.errors(),
            },
        )

    @app.exception_handler(SQLAlchemyError)
    async def persistence_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error("Database operation failed on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=500,
            content={
                "error": "PersistenceError",
                "message": "Database operation failed",
            },
        )

    # PUBLIC_INTERFACE
    @app.get("/health", summary="Health Check", tags=["health"], response_class=PlainTextResponse)
    def health_check() -> str:
        """
        Liveness probe. Does not check the database.
        """
        return "Healthy"

    app.include_router(todos_router.router)
    app.include_router(auth_router.router)
    return app


_settings = get_settings()
configure_logging(_settings.log_level)
app = create_app(_settings)
