"""
Services package - Read queries over the persisted companies, users and payments.
"""

from .catalog import UserQueries, user_queries

__all__ = ["UserQueries", "user_queries"]
