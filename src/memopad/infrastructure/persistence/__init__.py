"""Persistence infrastructure."""

from memopad.infrastructure.persistence.database import DatabaseManager
from memopad.infrastructure.persistence.memo_repository import (
    SQLMemoRepository,
    normalize_memo,
)
from memopad.infrastructure.persistence.models import MemoModel

__all__ = [
    "DatabaseManager",
    "MemoModel",
    "SQLMemoRepository",
    "normalize_memo",
]
