# aeinfo/middleware/request_context.py
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from typing import Callable

from aeinfo.core.logger import get_logger, new_request_id, request_id_ctx

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with a request id (echoed in the X-Request-ID
    header and in every log line) and logs its status and duration.
    """

    def __init__(self, app, dispatch: Callable = None):
        super().__init__(app, dispatch=dispatch)

    async def dispatch(self, request: Request, call_next):
        rid = request.headers.get("X-Request-ID") or new_request_id()
        token = request_id_ctx.set(rid)
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            response.headers["X-Request-ID"] = rid
            logger.info(
                "%s %s -> %s (%.1f ms)",
                request.method, request.url.path, response.status_code, elapsed_ms,
            )
            return response
        finally:
            request_id_ctx.reset(token)
