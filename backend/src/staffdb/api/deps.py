"""
Request-scoped dependencies.
"""

from typing import Iterator

from sqlalchemy.orm import Session

from staffdb.infrastructure.database import get_session
from staffdb.services.catalog import UserQueries, user_queries


def get_db() -> Iterator[Session]:
    """One session per request, rolled back on error and always closed."""
    with get_session() as session:
        yield session


def get_queries() -> UserQueries:
    return user_queries
