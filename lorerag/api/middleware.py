"""HTTP middleware for the LoreRAG API.

``create_app`` adds ErrorHandlingMiddleware before RequestLoggingMiddleware.
Starlette runs the last-added middleware outermost, so each request log
line reports the status code after LoreRAG errors have been mapped:

    client -> RequestLogging -> ErrorHandling -> route

Every request gets a ``request_id`` (taken from ``X-Request-ID`` when the
caller sends one) that is bound into structlog's context variables, so
service-level events logged during the request carry it as well.
"""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from lorerag.api.schemas import ErrorResponse
from lorerag.utils.errors import InvalidInputError, LoreRAGError, SourceNotFoundError
from lorerag.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
GENERIC_ERROR_DETAIL = "An error occurred while processing your request"


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow browser clients to call the read and ingest endpoints.

    Credentials are only allowed for an explicit origin list; browsers
    reject ``*`` combined with credentials.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One ``http_request`` event per request, at WARNING for 5xx responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        status = 500
        try:
            response = await call_next(request)
            status = response.status_code
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            log = _logger.warning if status >= 500 else _logger.info
            log(
                "http_request",
                method=request.method,
                path=request.url.path,
                status=status,
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
            structlog.contextvars.clear_contextvars()


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Map LoreRAG errors onto JSON :class:`ErrorResponse` bodies.

    ``InvalidInputError`` becomes 400 and ``SourceNotFoundError`` becomes
    404, both with the error message.  Any other ``LoreRAGError`` is a
    collaborator failure: it is logged with the provider, the path and the
    query length, and the client receives only a generic 500.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except InvalidInputError as exc:
            return _error_response(400, type(exc).__name__, exc.message)
        except SourceNotFoundError as exc:
            return _error_response(404, type(exc).__name__, exc.message)
        except LoreRAGError as exc:
            _logger.error(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=request.url.path,
                input_length=len(request.query_params.get("q", "")),
            )
            return _error_response(500, "InternalServerError", GENERIC_ERROR_DETAIL)


def _error_response(status_code: int, error: str, detail: str) -> JSONResponse:
    body = ErrorResponse(error=error, detail=detail)
    return JSONResponse(status_code=status_code, content=body.model_dump())
