"""Services package for business logic components.

This package contains service classes that encapsulate business logic
and operations that are reused across the application.
"""

from .thread_service import ThreadService

__all__ = ["ThreadService"]
