"""
Repository Layer - data access over the Supabase ``dd-*`` tables.

This module provides:
- Base repository protocols and a generic table repository
- The column catalogue of every table
- The user profile repository used by authentication
"""

from .base import (
    PagedResult,
    ReadOnlyRepository,
    RecordNotFound,
    Repository,
    SqlTableRepository,
    TableSpec,
)
from .users import SqlUserRepository, UserProfile, UserRepository

__all__ = [
    # Base
    "PagedResult",
    "ReadOnlyRepository",
    "RecordNotFound",
    "Repository",
    "SqlTableRepository",
    "TableSpec",
    # Users
    "SqlUserRepository",
    "UserProfile",
    "UserRepository",
]
