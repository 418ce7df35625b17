"""
FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from app.api.router import api_router
from app.core.config import settings
from app.core.errors import (
    AppError,
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from app.core.logging import RequestIDMiddleware, RequestLoggingMiddleware, get_logger, setup_logging
from app.infra.db import close_db_connection, create_all_tables

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    if settings.db_auto_create:
        await create_all_tables()
    logger.info("app.startup", env=settings.env)

    yield

    # Shutdown
    await close_db_connection()
    logger.info("app.shutdown")


tags_metadata = [
    {
        "name": "auth",
        "description": "Sign-up, login and onboarding.",
    },
    {
        "name": "friends",
        "description": "Recommendations, friends and friend requests.",
    },
    {
        "name": "health",
        "description": "System health check.",
    },
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Lingo Friends Backend",
        description="""
Language-exchange partner matching.

## Features
* **Recommendations**: Find onboarded learners you are not yet connected with.
* **Friend Requests**: Send, accept, decline and cancel requests.
* **Friends**: Symmetric friend lists built from accepted requests.
""",
        version="0.1.0",
        openapi_tags=tags_metadata,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={"persistAuthorization": True},
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

    @app.get("/", tags=["health"], include_in_schema=False)
    async def root():
        return {
            "message": "Welcome to Lingo Friends Backend API",
            "docs": "/docs",
            "status": "operational"
        }

    # Routes
    app.include_router(api_router, prefix=settings.api_prefix)

    # Exception Handlers
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()
