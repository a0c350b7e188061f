"""FastAPI entry point with the admin log viewer endpoints."""

import logging
from typing import Literal, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse

from app.auth import AuthError, require_admin
from app.config import Settings, get_settings
from app.log_context import (
    REQUEST_ID_HEADER,
    bind_request_context,
    generate_request_id,
    get_client_ip,
    reset_request_context,
)
from app.log_page import LOG_HTML
from app.log_store import InMemoryHandler, LogBuffer
from app.responses import error_response, paginated_response, success_response

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings, buffer: LogBuffer) -> InMemoryHandler:
    """Setup logging: console + in-memory buffer.

    Any ``InMemoryHandler`` left on the root logger by an earlier app is
    replaced, so only one buffer receives records.
    """
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)

    root = logging.getLogger()
    root.setLevel(log_level)
    for handler in list(root.handlers):
        if isinstance(handler, InMemoryHandler):
            root.removeHandler(handler)

    memory_handler = InMemoryHandler(buffer)
    memory_handler.setLevel(log_level)
    root.addHandler(memory_handler)
    return memory_handler


def get_log_buffer(request: Request) -> LogBuffer:
    return request.app.state.log_buffer


def create_app(settings: Optional[Settings] = None, buffer: Optional[LogBuffer] = None) -> FastAPI:
    """Build the application and the single log buffer it owns."""
    settings = settings or get_settings()
    if buffer is None:
        buffer = LogBuffer(
            capacity=settings.log_buffer_size,
            max_message_length=settings.max_message_length,
        )

    app = FastAPI(title="Admin Log Viewer")
    app.state.settings = settings
    app.state.log_buffer = buffer
    configure_logging(settings, buffer)

    @app.middleware("http")
    async def request_context(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        token = bind_request_context(
            requestId=request_id,
            method=request.method,
            path=request.url.path,
            clientIp=get_client_ip(request.headers, request.client.host if request.client else None),
        )
        try:
            response = await call_next(request)
        except Exception as e:
            # Logged once here, while the request context is still bound
            logger.exception("[API] Unhandled error on %s %s: %s", request.method, request.url.path, e)
            response = error_response("Internal server error", code="INTERNAL_ERROR", status_code=500)
        finally:
            reset_request_context(token)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        return error_response(exc.message, code=exc.code, status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        details = {}
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())[1:]) or "request"
            details.setdefault(field, []).append(error.get("msg", "Invalid value"))
        logger.debug("[API] Validation failed for %s: %s", request.url.path, details)
        return error_response("Validation failed", code="VALIDATION_ERROR", status_code=400, details=details)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    # ── Admin log endpoints ──

    @app.get("/admin/logs", response_class=HTMLResponse)
    async def logs_page():
        return LOG_HTML

    @app.get("/api/v1/admin/logs", dependencies=[Depends(require_admin)])
    def list_logs(
        level: Optional[Literal["debug", "info", "warn", "error"]] = None,
        search: Optional[str] = Query(None, max_length=200),
        page: int = Query(1, ge=1),
        limit: int = Query(50, ge=1, le=100),
        log_buffer: LogBuffer = Depends(get_log_buffer),
    ):
        search = search.strip() if search else None
        result = log_buffer.query(level=level, search=search or None, page=page, limit=limit)
        logger.debug(
            "[ADMIN] Log query level=%s search=%r page=%d limit=%d -> %d/%d",
            level, search, page, limit, len(result.entries), result.total,
        )
        return paginated_response(
            [entry.to_dict() for entry in result.entries],
            page=page,
            limit=limit,
            total=result.total,
        )

    @app.get("/api/v1/admin/logs/stats", dependencies=[Depends(require_admin)])
    def log_stats(log_buffer: LogBuffer = Depends(get_log_buffer)):
        return success_response(log_buffer.stats())

    @app.post("/api/v1/admin/logs/clear", dependencies=[Depends(require_admin)])
    def clear_logs(log_buffer: LogBuffer = Depends(get_log_buffer)):
        logger.info("[ADMIN] Clearing log buffer (%d entries)", log_buffer.size())
        cleared = log_buffer.clear()
        return success_response({"cleared": cleared})

    return app


app = create_app()
