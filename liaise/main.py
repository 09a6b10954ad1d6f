from contextlib import asynccontextmanager
import logging
import uuid

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from liaise.api import chat, delivery, feedback, health, portal, summaries, transcriptions
from liaise.api import settings as settings_api
from liaise.api.deps import client_ip
from liaise.config import settings
from liaise.database import close_db, init_db
from liaise.errors import PublicError, UpstreamServiceError, error_response
from liaise.logging import configure_logging, log_security_event, request_id_var

configure_logging()
logger = logging.getLogger("liaise")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    logger.info("Starting Liaise API")
    try:
        await init_db()
        logger.info("Database initialized")
    except Exception:
        logger.exception("Failed to initialize database")
        raise

    yield

    logger.info("Shutting down Liaise API")
    try:
        await close_db()
        logger.info("Database connections closed")
    except Exception:
        logger.exception("Error closing database")
    logger.info("Liaise API shutdown complete")


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    # Liaise API

    Patient-friendly medical summaries and consultation notes for clinicians.

    ## Features

    - **Summaries** - Rewrite discharge documents in plain language
    - **Transcriptions** - Record consultations, draft clinical notes
    - **Delivery** - Email summaries with a time-limited patient portal link
    - **Chat** - Patients ask questions grounded in their own summary
    """,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id", str(uuid.uuid4()))
    request_id_var.set(request_id)
    response = await call_next(request)
    response.headers.setdefault("X-Request-Id", request_id)
    return response


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("X-XSS-Protection", "1; mode=block")
    response.headers.setdefault("Referrer-Policy", "strict-origin-when-cross-origin")
    response.headers.setdefault(
        "Content-Security-Policy",
        "default-src 'none'; frame-ancestors 'none'; base-uri 'none'",
    )
    if not settings.debug:
        response.headers.setdefault(
            "Strict-Transport-Security",
            "max-age=63072000; includeSubDomains; preload",
        )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

app.include_router(health.router)
for router in (
    summaries.router,
    transcriptions.router,
    delivery.router,
    chat.router,
    feedback.router,
    portal.router,
    settings_api.router,
):
    app.include_router(router, prefix=settings.api_prefix)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if isinstance(exc, PublicError):
        message = exc.detail
    else:
        logger.warning("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
        message = None
    return error_response(
        exc.status_code,
        message,
        request_id=request_id_var.get(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning("Validation error on %s: %s", request.url.path, exc.errors())
    log_security_event(
        "validation_error",
        ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        details={"path": request.url.path, "errors": len(exc.errors())},
    )
    return error_response(status.HTTP_400_BAD_REQUEST, request_id=request_id_var.get())


@app.exception_handler(UpstreamServiceError)
async def upstream_exception_handler(request: Request, exc: UpstreamServiceError):
    logger.error("Upstream failure on %s: %s", request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, request_id=request_id_var.get())


@app.exception_handler(Exception)
async def unhandled_exception_handler(_request: Request, _exc: Exception):
    logger.exception("Unhandled error")
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, request_id=request_id_var.get())
