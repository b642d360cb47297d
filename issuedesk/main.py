import logging
import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from starlette.responses import JSONResponse, Response
from issuedesk.api.routes import analytics, attachments, auth, comments, issues, notifications
from issuedesk.core.config import settings
from issuedesk.core.logging import configure_logging, request_context
from issuedesk.core.limiter import limiter
from issuedesk.db.session import Database
from issuedesk.services.files import FileStore
from issuedesk.services.token_store import Store, build_store

MULTIPART_OVERHEAD_BYTES = 64 * 1024


def _error(request: Request, status_code: int, code: str, message, details=None, headers=None):
    body = {
        "code": code,
        "message": message,
        "request_id": getattr(request.state, "request_id", None),
    }
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def create_app(
    database: Database | None = None,
    token_store: Store | None = None,
    file_store: FileStore | None = None,
) -> FastAPI:
    """Build the API around explicitly supplied collaborators.

    Anything not passed in is built from settings; whatever the factory builds
    it also disposes of on shutdown.
    """
    owns_database = database is None
    if database is None:
        database = Database(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if owns_database:
            database.dispose()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.database = database
    app.state.token_store = token_store or build_store(settings.redis_url)
    app.state.file_store = file_store or FileStore(settings.upload_dir)

    rate_limit_enabled = settings.env.lower() != "test"
    if rate_limit_enabled:
        from slowapi.errors import RateLimitExceeded
        from slowapi.middleware import SlowAPIMiddleware

        app.state.limiter = limiter
        app.add_middleware(SlowAPIMiddleware)
        app.add_exception_handler(RateLimitExceeded, rate_limit_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=settings.allowed_methods,
        allow_headers=settings.allowed_headers,
        max_age=settings.cors_max_age,
    )
    app.middleware("http")(enforce_content_type)
    app.middleware("http")(limit_body_size)
    app.middleware("http")(security_headers)
    app.middleware("http")(add_request_id)

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.get("/health/live")(live)
    app.get("/health/ready")(ready)

    for module in (auth, issues, comments, attachments, notifications, analytics):
        app.include_router(module.router, prefix="/api")
    return app


async def add_request_id(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    client_ip = request.client.host if request.client else None
    with request_context(request_id, client_ip):
        start = time.monotonic()
        response: Response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        duration_ms = int((time.monotonic() - start) * 1000)
        logging.getLogger("access").info(
            "request",
            extra={
                "event": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                }
            },
        )
    return response


async def security_headers(request: Request, call_next):
    response: Response = await call_next(request)
    response.headers.setdefault("Content-Security-Policy", "default-src 'self'")
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    if settings.env.lower() == "production":
        response.headers.setdefault("Strict-Transport-Security", "max-age=63072000; includeSubDomains")
    return response


def _media_type(request: Request) -> str:
    return request.headers.get("content-type", "").split(";")[0].strip().lower()


async def limit_body_size(request: Request, call_next):
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        limit = settings.max_json_body_bytes
        if _media_type(request) == "multipart/form-data":
            limit = settings.max_upload_bytes + MULTIPART_OVERHEAD_BYTES
        if int(content_length) > limit:
            return _error(request, 413, "payload_too_large", "Request body too large")
    return await call_next(request)


async def enforce_content_type(request: Request, call_next):
    if request.method in {"POST", "PUT", "PATCH"}:
        content_length = request.headers.get("content-length")
        has_body = bool(content_length) and content_length.isdigit() and int(content_length) > 0
        if has_body and _media_type(request) not in {"application/json", "multipart/form-data"}:
            return _error(
                request,
                415,
                "unsupported_media_type",
                "Content-Type must be application/json or multipart/form-data",
            )
    return await call_next(request)


def live():
    return {"status": "ok"}


def ready(request: Request):
    with request.app.state.database.engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    return {"status": "ready"}


async def generic_exception_handler(request: Request, exc: Exception):
    logging.getLogger("issuedesk").exception(
        "Unhandled exception",
        extra={
            "event": {
                "method": request.method,
                "path": request.url.path,
                "request_id": getattr(request.state, "request_id", None),
            }
        },
    )
    message = "Internal server error"
    details = None
    if settings.env.lower() != "production":
        message = f"{exc.__class__.__name__}: {exc}"
        details = [{"type": exc.__class__.__name__}]
    return _error(request, 500, "internal_server_error", message, details)


async def rate_limit_handler(request: Request, exc: Exception):
    retry_after = None
    detail = getattr(exc, "detail", None)
    if isinstance(detail, dict):
        if "retry_after" in detail:
            retry_after = int(detail["retry_after"])
        elif "reset" in detail:
            retry_after = max(0, int(detail["reset"] - time.time()))
    headers = {}
    if retry_after is not None:
        headers["Retry-After"] = str(retry_after)
    return _error(request, 429, "rate_limited", "Too many requests", headers=headers)


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(
        request,
        400,
        "validation_error",
        "Validation error",
        details=jsonable_errors(exc),
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    errors = []
    for error in exc.errors():
        errors.append(
            {
                "type": error.get("type"),
                "loc": list(error.get("loc", ())),
                "msg": error.get("msg"),
            }
        )
    return errors


async def http_exception_handler(request: Request, exc: HTTPException):
    return _error(
        request,
        exc.status_code,
        f"http_{exc.status_code}",
        exc.detail,
        headers=getattr(exc, "headers", None),
    )


configure_logging(settings.log_level)

app = create_app()
