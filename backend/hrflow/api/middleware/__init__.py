"""
API Middleware

    - correlation: X-Correlation-Id tagging and one access log line per request
    - error_handlers: JSON error envelope for domain, validation and storage errors
"""

from .correlation import CorrelationIdMiddleware
from .error_handlers import register_error_handlers

__all__ = ["CorrelationIdMiddleware", "register_error_handlers"]
