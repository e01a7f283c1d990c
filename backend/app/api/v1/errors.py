"""
Service error → HTTP status mapping shared by all endpoints.
"""

from fastapi import HTTPException

from app.services.base import ServiceError


def to_http_exception(error: ServiceError) -> HTTPException:
    """
    Translate a service failure into the response the frontend sees.

    Unknown symbol → 404, quota → 429, provider failure → 502,
    anything else (e.g. no LLM configured) → 503.
    """
    return HTTPException(status_code=error.http_status, detail=error.message)
