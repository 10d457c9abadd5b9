"""ragchat API layer: routes, schemas, and middleware."""

from ragchat.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from ragchat.api.routes import router
from ragchat.api.schemas import ErrorResponse

__all__ = [
    "ErrorHandlingMiddleware",
    "ErrorResponse",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
]
