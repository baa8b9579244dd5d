"""
Request ID middleware - Inject X-Request-ID and log API calls.

Ingestion requests can run for minutes (one render per chronicle plus the
inter-item delay), so every /api call is logged with its duration and the
request id that also tags any error logged while serving it.
"""

import logging
import time
import uuid
from flask import Flask, request, g


logger = logging.getLogger("api.request")


def setup_request_id_middleware(app: Flask) -> None:
    """
    Set up request ID middleware on Flask app.

    Injects X-Request-ID into:
    - Flask's g object (g.request_id)
    - Response headers (X-Request-ID)

    Args:
        app: Flask application instance
    """

    @app.before_request
    def inject_request_id():
        # Use existing header if provided, otherwise generate new
        g.request_id = request.headers.get('X-Request-ID') or str(uuid.uuid4())
        g.request_start = time.perf_counter()

    @app.after_request
    def add_request_id_header(response):
        if hasattr(g, 'request_id'):
            response.headers['X-Request-ID'] = g.request_id

        if request.path.startswith("/api") and hasattr(g, "request_start"):
            logger.info(
                "api_request path=%s method=%s status=%s duration_ms=%s request_id=%s",
                request.path,
                request.method,
                response.status_code,
                round((time.perf_counter() - g.request_start) * 1000, 2),
                g.request_id,
            )
        return response
