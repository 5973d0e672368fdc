"""
Request context middleware for FastAPI.

Assigns every request an id (reusing an incoming X-Request-ID header), exposes it to the
JSON log formatter through the logging context var, logs one access line per request,
and echoes the id back in the response headers.
"""

import logging
import time
from typing import Any, Dict, Optional
from uuid import uuid4

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging_config import set_request_id

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware that tags each request with an id and logs its outcome."""

    def __init__(self, app, config: Optional[Dict[str, Any]] = None):
        super().__init__(app)
        self.config = config or {}

        # Paths whose requests are not access-logged
        self.exclude_paths = self.config.get('exclude_paths', [])

        self.header_name = self.config.get('header_name', REQUEST_ID_HEADER)

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or str(uuid4())
        set_request_id(request_id)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)

        response.headers[self.header_name] = request_id

        if not any(request.url.path.startswith(path) for path in self.exclude_paths):
            logger.info("request_completed", extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": duration_ms,
            })

        return response


def create_request_context_config() -> Dict[str, Any]:
    """Create default configuration for the request context middleware."""
    return {
        'exclude_paths': [
            '/health',
            '/docs',
            '/openapi.json',
            '/robots.txt',
        ],
        'header_name': REQUEST_ID_HEADER,
    }
