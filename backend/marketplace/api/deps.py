"""Shared API dependencies — single import point for all routers.

Re-exports the database session and authentication dependencies so that
router modules can import everything they need from one place::

    from marketplace.api.deps import get_db, get_current_provider
"""

from marketplace.auth.dependencies import get_current_provider
from marketplace.database import get_db

__all__ = [
    "get_db",
    "get_current_provider",
]
