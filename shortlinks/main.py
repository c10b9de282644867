"""Application entry point.

Builds the FastAPI app serving the link management API under
``settings.API_PREFIX`` and public redirects under ``settings.REDIRECT_PREFIX``.

Run with ``uvicorn shortlinks.main:app``.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shortlinks.api import api_router
from shortlinks.core.config import settings
from shortlinks.core.logging import setup_logging
from shortlinks.db.base import engine, init_models
from shortlinks.middleware.logging import add_logging_middleware

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        f"Starting {settings.APP_NAME} v{settings.APP_VERSION}",
        environment=settings.ENVIRONMENT.value,
        debug=settings.DEBUG,
    )
    if settings.DB_CREATE_TABLES:
        await init_models()

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()


def validation_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
        for error in exc.errors()
    ]


def register_exception_handlers(app: FastAPI) -> None:
    """Map framework and unexpected errors to JSON bodies."""

    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies only; field rules are reported as invalid_input by the service
        logger.warning(f"Request validation error on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": validation_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        error_id = uuid.uuid4().hex
        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path}",
            error_id=error_id,
            client_host=request.client.host if request.client else None,
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": "Internal server error",
                "error_id": error_id,
                "message": str(exc) if settings.DEBUG else "Internal server error",
            },
        )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    if settings.REQUEST_LOGGING_ENABLED:
        add_logging_middleware(app)

    app.include_router(api_router)
    register_exception_handlers(app)
    return app


app = create_app()
