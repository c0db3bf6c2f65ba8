"""API middleware for logging and error handling."""
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.exceptions import INTERNAL_ERROR_MESSAGE, RpcError, StatusCode
from ..core.logging import RequestLogger
from ..schemas.common import ErrorResponse

logger = structlog.get_logger("api.errors")


def error_response(error: RpcError) -> JSONResponse:
    """Render an RpcError as a JSON response."""
    body = ErrorResponse(
        error=error.message,
        error_code=error.error_code,
        details=error.details,
    )
    return JSONResponse(
        status_code=error.status_code,
        content=body.model_dump(mode="json", by_alias=True)
    )


async def request_validation_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as INVALID_ARGUMENT."""
    violations = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ())[1:]),
            "message": err.get("msg", "Invalid value"),
        }
        for err in exc.errors()
    ]
    message = ", ".join(v["message"] for v in violations) or "Invalid request"
    return error_response(
        RpcError(
            message,
            status=StatusCode.INVALID_ARGUMENT,
            details={"violations": violations}
        )
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging requests and responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # Log request
        start_time = time.time()
        RequestLogger.log_request(
            method=request.method,
            path=str(request.url.path),
            request_id=request_id,
            extra_data={
                "client_ip": request.client.host if request.client else None,
                "user_agent": request.headers.get("user-agent")
            }
        )

        # Process request
        response = await call_next(request)

        # Calculate response time
        response_time_ms = (time.time() - start_time) * 1000

        # Log response
        RequestLogger.log_response(
            method=request.method,
            path=str(request.url.path),
            status_code=response.status_code,
            response_time_ms=response_time_ms,
            request_id=request_id
        )

        # Add request ID to response headers
        response.headers["X-Request-ID"] = request_id

        return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware turning RPC failures into status responses."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except RpcError as e:
            return error_response(e)

        except Exception:
            # The cause is logged, never returned to the caller
            logger.exception("Unhandled error", path=str(request.url.path))
            return error_response(RpcError(INTERNAL_ERROR_MESSAGE, status=StatusCode.INTERNAL))
