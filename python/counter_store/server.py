"""FastAPI application exposing the counter store over HTTP."""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI, Path, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import (
    ConstraintViolationError,
    StoreError,
    StoreIOError,
    StoreUnavailableError,
)
from .logger import get_logger
from .schemas import CounterBody, ErrorResponse
from .store import CounterStore

logger = get_logger(__name__)

COUNTER_NOT_FOUND = "Counter not found"

# Single place where store failures become HTTP status codes.
_STATUS_BY_ERROR: dict[type[StoreError], int] = {
    StoreUnavailableError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ConstraintViolationError: status.HTTP_500_INTERNAL_SERVER_ERROR,
    StoreIOError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def status_for_store_error(exc: StoreError) -> int:
    for error_cls, status_code in _STATUS_BY_ERROR.items():
        if isinstance(exc, error_cls):
            return status_code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _describe_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(item) for item in error.get("loc", ()))
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "; ".join(parts) or "Invalid request"


def create_app(store: CounterStore) -> FastAPI:
    """Build the HTTP façade around an already initialized store.

    The store is the only shared state; handlers are synchronous and run in
    FastAPI's thread pool, so concurrency is bounded by the store's
    connection pool.
    """
    app = FastAPI(
        title="Counter Store",
        version="0.1.0",
        description="Namespaced integer counters backed by a relational database.",
    )

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        message = _describe_validation_error(exc)
        logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
        return _error(status.HTTP_400_BAD_REQUEST, message)

    @app.exception_handler(StoreError)
    async def handle_store_error(request: Request, exc: StoreError) -> JSONResponse:
        status_code = status_for_store_error(exc)
        logger.warning(
            "%s %s failed with %s: %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc,
        )
        return _error(status_code, str(exc))

    @app.post(
        "/api/{namespace}/{counter}",
        response_model=CounterBody,
        responses=_ERROR_RESPONSES,
    )
    def update_counter(
        body: CounterBody,
        namespace: str = Path(..., min_length=1, max_length=255),
        counter: str = Path(..., min_length=1, max_length=255),
    ) -> CounterBody:
        stored = store.set(namespace, counter, body.count)
        return CounterBody(count=stored.count)

    @app.get(
        "/api/{namespace}/{counter}",
        response_model=CounterBody,
        responses={
            **_ERROR_RESPONSES,
            status.HTTP_404_NOT_FOUND: {"model": ErrorResponse},
        },
    )
    def get_counter(
        namespace: str = Path(..., min_length=1, max_length=255),
        counter: str = Path(..., min_length=1, max_length=255),
    ):
        stored = store.get(namespace, counter)
        if stored is None:
            return _error(status.HTTP_404_NOT_FOUND, COUNTER_NOT_FOUND)
        return CounterBody(count=stored.count)

    return app
