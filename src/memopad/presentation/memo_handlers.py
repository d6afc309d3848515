"""HTTP handlers for memo operations."""

import json
import logging
from typing import Any

from aiohttp import web

from memopad.domain.entities.memo import Memo, MemoFormData
from memopad.domain.exceptions import StoreError
from memopad.domain.repositories import MemoRepository

logger = logging.getLogger(__name__)


def memo_to_dict(memo: Memo) -> dict[str, Any]:
    """Convert a Memo to a JSON-serializable dict.

    Args:
        memo: Memo entity.

    Returns:
        Dict with ISO-8601 timestamps and the category display label.
    """
    return {
        "id": memo.id,
        "title": memo.title,
        "content": memo.content,
        "category": memo.category,
        "category_label": memo.category_label,
        "tags": list(memo.tags),
        "created_at": memo.created_at.isoformat(),
        "updated_at": memo.updated_at.isoformat(),
    }


def form_from_payload(payload: Any) -> MemoFormData:
    """Build MemoFormData from a request body.

    Args:
        payload: Decoded JSON body.

    Returns:
        Validated form data.

    Raises:
        ValueError: If the payload is not an object or fails validation.
    """
    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    title = payload.get("title")
    if not isinstance(title, str):
        raise ValueError("Field 'title' is required")
    content = payload.get("content")
    category = payload.get("category")
    return MemoFormData(
        title=title,
        content="" if content is None else content,
        category="other" if category in (None, "") else category,
        tags=payload.get("tags"),
    )


def _error_response(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _read_form(request: web.Request) -> MemoFormData:
    try:
        payload = await request.json()
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON: {e.msg}") from e
    return form_from_payload(payload)


def register_memo_routes(app: web.Application, repository: MemoRepository) -> None:
    """Register memo routes.

    Args:
        app: aiohttp Application.
        repository: Repository backing the routes.
    """

    async def handle_list(request: web.Request) -> web.Response:
        """GET /memos with optional ?q= or ?category= filters."""
        query = request.query.get("q")
        category = request.query.get("category")
        try:
            if query:
                memos = await repository.search(query)
            elif category:
                memos = await repository.list_by_category(category)
            else:
                memos = await repository.list_all()
        except StoreError:
            logger.exception("Error listing memos")
            return _error_response("Failed to load memos", 500)
        return web.json_response([memo_to_dict(memo) for memo in memos])

    async def handle_create(request: web.Request) -> web.Response:
        """POST /memos."""
        try:
            form = await _read_form(request)
        except ValueError as e:
            return _error_response(str(e), 400)
        try:
            memo = await repository.create(form)
        except StoreError:
            logger.exception("Error creating memo")
            return _error_response("Failed to create memo", 500)
        return web.json_response(memo_to_dict(memo), status=201)

    async def handle_get(request: web.Request) -> web.Response:
        """GET /memos/{memo_id}."""
        memo_id = request.match_info["memo_id"]
        try:
            memo = await repository.get_by_id(memo_id)
        except StoreError:
            logger.exception("Error fetching memo %s", memo_id)
            return _error_response("Failed to load memo", 500)
        if memo is None:
            return _error_response(f"Memo not found: {memo_id}", 404)
        return web.json_response(memo_to_dict(memo))

    async def handle_update(request: web.Request) -> web.Response:
        """PUT /memos/{memo_id}."""
        memo_id = request.match_info["memo_id"]
        try:
            form = await _read_form(request)
        except ValueError as e:
            return _error_response(str(e), 400)
        try:
            memo = await repository.update(memo_id, form)
        except StoreError as e:
            if e.is_not_found:
                return _error_response(f"Memo not found: {memo_id}", 404)
            logger.exception("Error updating memo %s", memo_id)
            return _error_response("Failed to update memo", 500)
        return web.json_response(memo_to_dict(memo))

    async def handle_delete(request: web.Request) -> web.Response:
        """DELETE /memos/{memo_id}."""
        memo_id = request.match_info["memo_id"]
        try:
            await repository.delete_by_id(memo_id)
        except StoreError:
            logger.exception("Error deleting memo %s", memo_id)
            return _error_response("Failed to delete memo", 500)
        return web.Response(status=204)

    app.router.add_get("/memos", handle_list)
    app.router.add_post("/memos", handle_create)
    app.router.add_get("/memos/{memo_id}", handle_get)
    app.router.add_put("/memos/{memo_id}", handle_update)
    app.router.add_delete("/memos/{memo_id}", handle_delete)
