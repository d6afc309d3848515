"""Domain entities."""

from memopad.domain.entities.memo import (
    FALLBACK_CATEGORY_LABEL,
    Memo,
    MemoCategory,
    MemoFormData,
    category_label,
)

__all__ = [
    "FALLBACK_CATEGORY_LABEL",
    "Memo",
    "MemoCategory",
    "MemoFormData",
    "category_label",
]
