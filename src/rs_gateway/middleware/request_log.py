"""Request logging middleware.

Every request gets a request ID, taken from an incoming X-Request-ID header
when it looks sane, generated otherwise. It is stored on request.state for
the ApiResponse envelope and echoed back in the X-Request-ID response
header. Server errors log at WARNING so they stand out from traffic.

Log format:
    INFO [POST] /api/v1/wallets/12/adjust -> 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("rs.request")

_CLIENT_REQUEST_ID = re.compile(r"^[A-Za-z0-9_\-]{8,64}$")


def _request_id_for(request: Request) -> str:
    incoming = request.headers.get("X-Request-ID", "")
    if _CLIENT_REQUEST_ID.match(incoming):
        return incoming
    return f"req_{uuid.uuid4().hex[:12]}"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request.state.request_id = _request_id_for(request)

        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request.state.request_id
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "[%s] %s -> %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.state.request_id,
        )
        return response
