"""
Connect B2B — directory search, connections and gated disclosure.

App wiring only: logging, middleware, exception handlers, routers, and the
lifespan that owns the search audit log's worker pool.
"""
import uuid
from concurrent.futures import ThreadPoolExecutor
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import settings
from .database import get_session_factory
from .errors import DirectoryError, StoreUnavailable
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers import companies, connections, master, search
from .schemas.errors import ErrorResponse
from .services.audit_service import SearchAuditLog
from .startup import run_startup_migrations

APP_VERSION = "1.0.0"

setup_logging()


# --- App Lifecycle ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    run_startup_migrations()
    app.state.search_audit = SearchAuditLog(
        get_session_factory(),
        ThreadPoolExecutor(max_workers=settings.audit_workers, thread_name_prefix="search-audit"),
    )
    logger.info("Connect B2B started", version=APP_VERSION)
    yield
    app.state.search_audit.close()
    logger.info("Connect B2B stopped")


app = FastAPI(title="Connect B2B", version=APP_VERSION, lifespan=lifespan)
app.state.limiter = limiter
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key)


# --- Middleware ---
_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-API-Version": "v1",
}


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    for name, value in _SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


# --- Exception Handlers ---
def _error(request: Request, status_code: int, message: str, code: str,
           detail: list | None = None, headers: dict | None = None) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        code=code,
        status_code=status_code,
        request_id=getattr(request.state, "request_id", ""),
        detail=detail,
    )
    return JSONResponse(body.model_dump(), status_code=status_code, headers=headers)


_HTTP_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    409: "conflict",
}


@app.exception_handler(DirectoryError)
async def directory_error_handler(request: Request, exc: DirectoryError):
    if exc.detail and exc.detail != exc.public_message:
        logger.warning("{} on {}: {}", exc.code, request.url.path, exc.detail)
    headers = {"Retry-After": "5"} if isinstance(exc, StoreUnavailable) else None
    return _error(request, exc.status_code, exc.public_message, exc.code, headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    code = _HTTP_CODES.get(exc.status_code, "http_error")
    return _error(request, exc.status_code, str(exc.detail), code, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    detail = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")}
        for e in exc.errors()
    ]
    return _error(request, 422, "Invalid request", "validation_error", detail=detail)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on {} {}", request.method, request.url.path)
    return _error(request, 500, "Internal server error", "internal_error")


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# --- Routers ---
app.include_router(search.router)
app.include_router(connections.router)
app.include_router(companies.router)
app.include_router(master.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}
