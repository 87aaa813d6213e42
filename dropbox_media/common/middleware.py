"""
FastAPI middleware tagging every media manager request with a correlation ID.
"""

import time
import logging
from typing import Callable
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from dropbox_media.common.logging_config import set_request_id, clear_request_id

logger = logging.getLogger(__name__)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """
    Reuses or generates X-Request-ID, so adapter logs of one media manager
    call can be correlated, and logs the request outcome.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_id(request.headers.get("X-Request-ID") or None)
        start_time = time.time()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "extra_fields": {
                        "method": request.method,
                        "path": request.url.path,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    }
                },
            )
            raise
        finally:
            clear_request_id()

        response.headers["X-Request-ID"] = request_id
        logger.info(
            "Request completed",
            extra={
                "extra_fields": {
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "request_id": request_id,
                }
            },
        )
        return response
