# lokalaku/middleware/logging.py
# Per-request log context: request id, method and path on every line.

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

log = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds a request id to every log line of a request and echoes it back as X-Request-ID.

    A caller-supplied X-Request-ID is kept so traces line up across services.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        clear_contextvars()
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        bind_contextvars(request_id=request_id, http_method=request.method, path=request.url.path)
        request.state.request_id = request_id

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            log.exception("http_request_failed", elapsed_ms=_elapsed_ms(started), error=str(e))
            raise

        # 4xx are the caller's problem, 5xx are ours
        emit = log.warning if response.status_code >= 500 else log.info
        emit("http_request", status_code=response.status_code, elapsed_ms=_elapsed_ms(started))

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
