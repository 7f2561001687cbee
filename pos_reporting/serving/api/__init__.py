"""
API Module
"""
from .dependencies import get_report_service
from .middleware import RateLimitMiddleware, RequestContextMiddleware

__all__ = [
    "get_report_service",
    "RateLimitMiddleware",
    "RequestContextMiddleware",
]
