from contextlib import asynccontextmanager
from datetime import datetime, timezone

import socketio
import structlog
import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from roomloop.api.v1.endpoints.auth_router import router as auth_router
from roomloop.api.v1.endpoints.room_router import router as rooms_router
from roomloop.api.v1.endpoints.user_router import router as users_router
from roomloop.core.config import settings
from roomloop.core.database import AsyncSessionLocal, create_tables
from roomloop.core.exceptions import (
    ConflictException,
    DomainException,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from roomloop.core.logging_config import configure_logging
from roomloop.realtime.gateway import RealtimeGateway
from roomloop.realtime.realtime_dependencies import broadcaster, sio
from roomloop.workers.ticker import LifecycleTicker

configure_logging(debug=settings.debug, json_logs=settings.log_json)
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for startup and shutdown.
    """
    logger.info("app_starting", app_name=settings.app_name)
    await create_tables()

    ticker = None
    if settings.lifecycle_inline_enabled:
        ticker = LifecycleTicker(AsyncSessionLocal, interval_seconds=settings.lifecycle_interval_seconds)
        ticker.start()

    yield

    if ticker is not None:
        await ticker.stop()
    logger.info("app_stopped")


app = FastAPI(
    title=settings.app_name,
    description="Scheduled, time-boxed chat rooms",
    docs_url="/docs",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Exception Handlers (Convert Domain Exceptions → HTTP Responses)
# ============================================================================


def _error_response(status_code: int, message: str, error_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "error_code": error_code,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )


@app.exception_handler(ValidationException)
async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """Handle validation exceptions."""
    return _error_response(status.HTTP_400_BAD_REQUEST, exc.message, exc.error_code)


@app.exception_handler(UnauthorizedException)
async def unauthorized_exception_handler(request: Request, exc: UnauthorizedException) -> JSONResponse:
    """Handle authentication exceptions."""
    return _error_response(status.HTTP_401_UNAUTHORIZED, exc.message, exc.error_code)


@app.exception_handler(ForbiddenException)
async def forbidden_exception_handler(request: Request, exc: ForbiddenException) -> JSONResponse:
    """Handle authorization exceptions, invalid tokens and non-joinable rooms."""
    return _error_response(status.HTTP_403_FORBIDDEN, exc.message, exc.error_code)


@app.exception_handler(NotFoundException)
async def not_found_exception_handler(request: Request, exc: NotFoundException) -> JSONResponse:
    """Handle resource not found exceptions."""
    return _error_response(status.HTTP_404_NOT_FOUND, exc.message, exc.error_code)


@app.exception_handler(ConflictException)
async def conflict_exception_handler(request: Request, exc: ConflictException) -> JSONResponse:
    """Handle duplicates, full rooms and repeated joins."""
    return _error_response(status.HTTP_409_CONFLICT, exc.message, exc.error_code)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Fallback handler for all other domain exceptions."""
    logger.error("unmapped_domain_exception", error_code=exc.error_code, path=request.url.path)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, exc.message, exc.error_code)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report the first invalid field as a 400."""
    errors = exc.errors()
    message = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return _error_response(status.HTTP_400_BAD_REQUEST, message, ValidationException.error_code)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected errors; never leak internals to the client."""
    logger.exception("unhandled_exception", path=request.url.path, method=request.method)
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error", "INTERNAL_ERROR")


# ============================================================================
# Router Registration
# ============================================================================

API_PREFIX = "/api"

app.include_router(auth_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(rooms_router, prefix=API_PREFIX)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


# ============================================================================
# Realtime (Socket.IO on /socket.io, everything else to FastAPI)
# ============================================================================

RealtimeGateway(sio, broadcaster, settings).register()

asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)


if __name__ == "__main__":
    uvicorn.run("main:asgi_app", host="0.0.0.0", port=8000, reload=settings.debug)
