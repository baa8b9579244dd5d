"""
Error envelope middleware - Standardize all error responses.

Provides consistent error response format:
{
    "error": {
        "code": "INTERNAL_ERROR",
        "message": "An unexpected error occurred",
        "requestId": "uuid"
    }
}

Ingestion errors keep their type up to this point and are logged as such,
then flattened into INTERNAL_ERROR. Invalid request params are BAD_REQUEST.
"""

import logging
from flask import Flask, jsonify, g
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException

from scrapers.errors import ExtractionError, IngestionError


logger = logging.getLogger('api.middleware.error')


def setup_error_handlers(app: Flask) -> None:
    """
    Set up standardized error handlers on Flask app.

    Handles:
    - HTTP exceptions (400, 404, 500, etc.)
    - Request param validation errors
    - Ingestion errors and unhandled Python exceptions

    Args:
        app: Flask application instance
    """

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        """Handle Flask/Werkzeug HTTP exceptions."""
        # Convert error name to error code
        # "Not Found" -> "NOT_FOUND"
        code = error.name.upper().replace(' ', '_')
        return make_error_response(code, error.description, status_code=error.code)

    @app.errorhandler(ValidationError)
    def handle_validation_error(error):
        """Handle invalid request params."""
        details = [
            {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
            for e in error.errors()
        ]
        return make_error_response(
            "BAD_REQUEST",
            "Invalid request parameters",
            details={"errors": details},
        )

    @app.errorhandler(IngestionError)
    def handle_ingestion_error(error):
        """Log the typed failure, answer with a generic one."""
        request_id = getattr(g, 'request_id', None)
        extra = {
            "event": "ingestion_error",
            "request_id": request_id,
            "error_type": type(error).__name__,
        }
        if isinstance(error, ExtractionError):
            extra["url"] = error.url
        logger.exception(f"Ingestion failed: {error}", extra=extra)
        return make_error_response("INTERNAL_ERROR", "An unexpected error occurred")

    @app.errorhandler(Exception)
    def handle_generic_error(error):
        """Handle unhandled Python exceptions."""
        request_id = getattr(g, 'request_id', None)

        # Log the full exception
        logger.exception(
            f"Unhandled error: {error}",
            extra={
                "event": "unhandled_error",
                "request_id": request_id,
                "error_type": type(error).__name__,
            }
        )
        return make_error_response("INTERNAL_ERROR", "An unexpected error occurred")


# Error codes reference
ERROR_CODES = {
    "BAD_REQUEST": 400,
    "NOT_FOUND": 404,
    "METHOD_NOT_ALLOWED": 405,
    "INTERNAL_ERROR": 500,
}


def make_error_response(
    code: str,
    message: str,
    status_code: int = None,
    details: dict = None,
):
    """
    Create a standardized error response.

    Args:
        code: Error code (e.g., "BAD_REQUEST")
        message: Human-readable error message
        status_code: HTTP status code (defaults based on error code)
        details: Optional additional details dict

    Returns:
        Tuple of (response, status_code)
    """
    request_id = getattr(g, 'request_id', None)

    if status_code is None:
        status_code = ERROR_CODES.get(code, 500)

    error = {
        "error": {
            "code": code,
            "message": message,
            "requestId": request_id,
        }
    }
    if details:
        error["error"]["details"] = details

    response = jsonify(error)
    if request_id:
        response.headers['X-Request-ID'] = request_id

    return response, status_code
