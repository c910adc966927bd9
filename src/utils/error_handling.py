"""
Centralized Error Handling and Logging
Every failure becomes a JSON response with a trace id; none of them stops the server.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime
from typing import Any, Dict, Optional, Union
from contextvars import ContextVar

from fastapi import Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

# Context variable for request tracing
request_id_var: ContextVar[str] = ContextVar('request_id', default='')

logger = logging.getLogger(__name__)


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization', 'credential'
    ]

    MAX_BODY_LOG_SIZE = 5000  # Truncate large bodies

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively redact sensitive fields and truncate long strings"""
        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(str(key)) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data


def _request_trace_id(request: Optional[Request]) -> Optional[str]:
    """Trace id assigned by RequestContextMiddleware; request.state lives in the shared scope"""
    if request is None:
        return None
    return getattr(request.state, "trace_id", None)


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[Exception] = None,
        extra_context: Optional[Dict] = None,
        include_traceback: bool = True,
        level: int = logging.ERROR
    ) -> str:
        """Log a JSON error entry and return its trace id"""

        trace_id = _request_trace_id(request) or request_id_var.get('') or str(uuid.uuid4())[:8]

        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": logging.getLevelName(level)
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "headers": ErrorHandlingConfig.sanitize_data(headers),
                "client_ip": request.client.host if request.client else None
            }

        if exception:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception)
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        if extra_context:
            log_entry["context"] = ErrorHandlingConfig.sanitize_data(extra_context)

        logger.log(level, json.dumps(log_entry, indent=2, default=str))

        return trace_id


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Assign a trace id to every request and echo it in X-Trace-ID"""

    async def dispatch(self, request: Request, call_next):
        trace_id = str(uuid.uuid4())[:8]
        request_id_var.set(trace_id)
        request.state.trace_id = trace_id

        response = await call_next(request)
        response.headers["X-Trace-ID"] = trace_id
        return response


def _error_response(status_code: int, content: Dict[str, Any], trace_id: str) -> JSONResponse:
    # Set the header here too: the catch-all handler runs outside RequestContextMiddleware
    content["trace_id"] = trace_id
    content["timestamp"] = datetime.utcnow().isoformat()
    return JSONResponse(
        status_code=status_code,
        content=content,
        headers={"X-Trace-ID": trace_id}
    )


# Global Exception Handlers
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions raised by routes"""

    trace_id = StructuredLogger.log_error(
        f"http_{exc.status_code}",
        f"HTTP {exc.status_code}: {exc.detail}",
        request=request,
        exception=exc,
        extra_context={"status_code": exc.status_code},
        include_traceback=False,
        level=logging.ERROR if exc.status_code >= 500 else logging.WARNING
    )

    return _error_response(
        exc.status_code,
        {"error": f"HTTP {exc.status_code}", "message": exc.detail},
        trace_id
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed requests (bad JSON, wrong field types, non-integer ids) as HTTP 400"""

    validation_details = []
    for error in exc.errors():
        validation_details.append({
            "field": " -> ".join(str(loc) for loc in error.get("loc", [])),
            "message": error.get("msg", "Unknown validation error"),
            "type": error.get("type", "unknown"),
            "input": error.get("input", "not_provided")
        })

    trace_id = StructuredLogger.log_error(
        "validation_error_400",
        f"Request validation failed: {len(validation_details)} validation errors",
        request=request,
        exception=exc,
        extra_context={
            "validation_errors": validation_details,
            "request_body": getattr(exc, "body", None)
        },
        include_traceback=False,
        level=logging.WARNING
    )

    return _error_response(
        400,
        {
            "error": "Bad Request",
            "message": "Malformed request",
            "detail": json.loads(json.dumps(validation_details, default=str)),
        },
        trace_id
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""

    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        include_traceback=True
    )

    # Don't expose internal details
    return _error_response(
        500,
        {"error": "Internal Server Error", "message": "An unexpected error occurred"},
        trace_id
    )


def setup_error_handling(app):
    """Install request tracing and the exception handlers on the app"""

    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling system initialized")
