"""Per-request ID and access log for the users API.

Clients may pass X-Request-ID to correlate their calls; otherwise one is
generated. The ID is echoed on the response and stamped on every log record
emitted while the request is handled.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class _RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get()  # type: ignore[attr-defined]
        return True


def install_request_id_filter(target: logging.Logger | None = None) -> None:
    target = target or logging.getLogger()
    if not any(isinstance(f, _RequestIdFilter) for f in target.filters):
        target.addFilter(_RequestIdFilter())


install_request_id_filter()


def _access_level(status_code: int) -> int:
    # 4xx is the client's problem and already logged by the handlers
    return logging.ERROR if status_code >= 500 else logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        req_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        token = request_id_var.set(req_id)
        start = time.perf_counter()
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.log(
            _access_level(response.status_code),
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            extra={
                "request_id": req_id,
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(elapsed_ms, 1),
            },
        )
        response.headers[REQUEST_ID_HEADER] = req_id
        return response
