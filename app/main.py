"""Todo Tracker ASGI app.

create_app() wires logging, CORS for the browser client, the error
envelope handlers and the /api/v1 auth and todo routes. /health sits
outside the versioned prefix and needs no session.
"""

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.api.v1.router import router as v1_router
from app.core.config import settings
from app.core.errors import APIError
from app.core.logging import configure_logging
from app.core.responses import ErrorDetail, ErrorResponse

logger = structlog.get_logger()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Stamp browser hardening headers on every response.

    The API only ever returns JSON, so the CSP denies all loading and
    framing. Anything under /api/ can carry a user's todos or profile and
    is marked no-store. HSTS is added only when running in production.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; frame-ancestors 'none'"
        )

        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store, max-age=0"

        # TLS terminates at the proxy in production.
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response


def _error_response(
    status_code: int, code: str, message: str, details: list | None = None
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=code, message=message, details=details)
        ).model_dump(),
    )


def api_error_handler(_request: Request, exc: APIError) -> JSONResponse:
    """Render an APIError as its status plus the error envelope."""
    return _error_response(exc.status_code, exc.code, exc.message, exc.details)


def validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Report malformed request bodies as 400 VALIDATION_ERROR.

    Each detail keeps only loc, msg and type. The offending input is
    dropped so a rejected password never comes back in the response.
    """
    return _error_response(
        400,
        "VALIDATION_ERROR",
        "Request validation failed",
        [{"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]} for e in exc.errors()],
    )


def internal_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback server-side and answer with a bare 500."""
    logger.exception("Unhandled exception", exc_info=exc, path=str(request.url.path))
    return _error_response(500, "INTERNAL_ERROR", "An unexpected error occurred")


def create_app() -> FastAPI:
    """Build a fresh application.

    Tests call this directly to get an app they can add throwaway routes
    and dependency overrides to without touching the module-level `app`.
    """
    configure_logging()

    app = FastAPI(
        title="Todo Tracker API",
        version="1.0.0",
        description="Per-user todo lists behind cookie session auth",
    )

    # Added last so it wraps everything and answers preflights itself.
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Accept"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, internal_error_handler)

    app.include_router(v1_router, prefix="/api/v1")

    @app.get("/health")
    def health_check() -> dict:
        """Liveness check; touches neither the database nor the session."""
        return {"status": "healthy"}

    return app


# uvicorn app.main:app
app = create_app()
