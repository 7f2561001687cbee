"""
Serving Module
"""
from .cache import CacheState, ResultCache

__all__ = [
    "CacheState",
    "ResultCache",
]
