"""Main entrypoint and application factory for the ScholarPay API.

This module initializes the FastAPI application, configures logging, creates the database tables, maps domain errors to HTTP answers, and exposes the Scalar API reference endpoint for interactive OpenAPI documentation. It also includes the main entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference
from sqlalchemy.exc import SQLAlchemyError

from scholarpay.api.routes import router
from scholarpay.core.db import get_engine, init_db
from scholarpay.core.errors import (
    ApplicationNotFoundError,
    ApplicationValidationError,
    PersistenceError,
    ProviderError,
)
from scholarpay.core.settings import get_settings
from scholarpay.core.utils import get_logger

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure the project loggers and, when log_file is set, add a plain-text file handler."""
    logger = get_logger("scholarpay")
    logger.setLevel(logging.INFO)
    log_file = get_settings().log_file
    if log_file and not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)
    logger.propagate = False


setup_logging()
logger = get_logger("scholarpay.app")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler to create the applications, payee task and token tables."""
    _ = app  # Silence unused argument warning
    try:
        init_db(get_engine())
    except SQLAlchemyError:
        logger.exception("Failed to create database tables")
        raise
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="ScholarPay API",
    description="""
    The ScholarPay API runs a scholarship portal for students and government reviewers, paying approved scholarships through a natural-language payment provider.

    **Endpoints:**
    - `POST /applications`: Submit a scholarship application (student).
    - `GET /applications`, `GET /applications/mine`: List applications.
    - `PATCH /applications/{id}/status`: Approve or reject an application (government).
    - `POST /applications/{id}/pay`: Pay an approved application (government).
    - `GET /payees`, `GET /wallet/balance`, `GET /wallet/transactions`: Provider data, normalized.
    - `POST /normalize`: Normalize raw provider text.
    - `GET /oauth/callback`: OAuth redirect target.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version="1.0.0",
)
app.include_router(router)


@app.exception_handler(ApplicationNotFoundError)
async def not_found_handler(request: Request, exc: ApplicationNotFoundError) -> JSONResponse:
    """Answer 404 for unknown applications."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ApplicationValidationError)
async def validation_handler(request: Request, exc: ApplicationValidationError) -> JSONResponse:
    """Answer 422 for invalid application fields."""
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer 422 for malformed requests without echoing the rejected input, which may not be valid JSON."""
    errors = [
        {key: value for key, value in error.items() if key not in ("input", "ctx", "url")} for error in exc.errors()
    ]
    logger.warning(f"{request.method} {request.url.path}: invalid request {errors}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


@app.exception_handler(PersistenceError)
async def persistence_handler(request: Request, exc: PersistenceError) -> JSONResponse:
    """Answer 503 when the application store fails; nothing was applied."""
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=503, content={"detail": "The application store is unavailable. Please retry."})


@app.exception_handler(ProviderError)
async def provider_handler(request: Request, exc: ProviderError) -> JSONResponse:
    """Answer 502 when a provider command fails."""
    logger.error(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": f"Payment provider error: {exc}"})


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> JSONResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
