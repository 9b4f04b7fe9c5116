"""Middleware and exception handlers for the intake-seed API.

Every error leaves the API as ``{error, details?}``.
"""

import logging
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from intake_seed.api.errors import ApiError
from intake_seed.domain.ports import IntakeSeedError

logger = logging.getLogger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Log request and response details.

        Returns:
            Response: HTTP response with X-Process-Time header
        """
        start_time = time.time()
        client = request.client.host if request.client else "unknown"
        logger.info(f"{request.method} {request.url.path} - Client: {client}")

        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.3f}"

        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )
        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns exceptions no handler claimed into JSON error responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except ValueError as e:
            logger.warning(f"Validation error: {str(e)}")
            return JSONResponse(status_code=400, content={"error": "Bad Request", "details": str(e)})
        except Exception as e:
            logger.error(f"Unexpected error on {request.method} {request.url.path}: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"error": "Internal server error", "details": str(e) or type(e).__name__}
            )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.details or 'no details'})")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def domain_error_handler(request: Request, exc: IntakeSeedError) -> JSONResponse:
    return await api_error_handler(request, ApiError.from_exception(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request-model validation failures as 400."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    logger.warning(f"{request.method} {request.url.path} invalid request: {'; '.join(problems)}")
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": "; ".join(problems)}
    )


def setup_middleware(app: FastAPI) -> None:
    """Register exception handlers and middleware.

    Middleware Order (important):
        1. ErrorHandlingMiddleware - Catches anything the handlers did not
        2. LoggingMiddleware - Logs requests/responses, outermost
    """
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(IntakeSeedError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(LoggingMiddleware)
