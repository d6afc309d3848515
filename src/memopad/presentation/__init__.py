"""Presentation layer."""

from memopad.presentation.memo_handlers import (
    form_from_payload,
    memo_to_dict,
    register_memo_routes,
)

__all__ = ["form_from_payload", "memo_to_dict", "register_memo_routes"]
