"""
Middleware package for the course catalog.

This package contains middleware components for the FastAPI application,
such as request-id propagation and access logging.
"""

from .request_context import RequestContextMiddleware, create_request_context_config

__all__ = [
    'RequestContextMiddleware',
    'create_request_context_config'
]
