"""
Routes module - contains all API route handlers
"""

from .session import router as session_router

__all__ = [
    "session_router",
]
