"""Request logging middleware.

One line per request: method, path, status, latency and the request id.
An inbound X-Request-ID (from a proxy or the event substrate) is kept,
otherwise a fresh id is made. The id goes on request.state for the
response envelope and back out on the X-Request-ID response header.

    INFO tm.request: [POST] /api/v1/matches/complete → 200 (23ms) req_a1b2c3d4e5f6
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.tm_common.response import new_request_id

logger = logging.getLogger("tm.request")

REQUEST_ID_HEADER = "X-Request-ID"
_MAX_INBOUND_ID_LEN = 64


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        inbound = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = inbound if 0 < len(inbound) <= _MAX_INBOUND_ID_LEN else new_request_id()
        request.state.request_id = request_id

        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            logger.exception(
                "[%s] %s → unhandled error (%.0fms) %s",
                request.method,
                request.url.path,
                (time.perf_counter() - start) * 1000,
                request_id,
            )
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - start) * 1000,
            request_id,
        )
        return response
