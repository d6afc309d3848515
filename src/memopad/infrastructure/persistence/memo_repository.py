"""SQL implementation of MemoRepository."""

import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import AbstractAsyncContextManager, contextmanager
from typing import Any

from sqlalchemy import delete, insert, or_, update
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from memopad.domain.entities.memo import Memo, MemoFormData
from memopad.domain.exceptions import StoreError
from memopad.infrastructure.persistence.datetime_utils import coalesce_timestamp
from memopad.infrastructure.persistence.models import MemoModel

logger = logging.getLogger(__name__)


def normalize_memo(model: MemoModel) -> Memo:
    """MemoModel を正規化して Memo エンティティに変換

    NULL の tags は空リストに、NULL の日時は現在時刻に置き換える。
    行を返すすべての操作はこの関数を通す。

    Args:
        model: MemoModel インスタンス

    Returns:
        Memo エンティティ
    """
    return Memo(
        id=model.id,
        title=model.title,
        content=model.content,
        category=model.category,
        tags=list(model.tags or []),
        created_at=coalesce_timestamp(model.created_at),
        updated_at=coalesce_timestamp(model.updated_at),
    )


def unique_by_id(memos: Iterable[Memo]) -> list[Memo]:
    """ID で重複を除去する（最初の出現を残す）

    Args:
        memos: メモの列

    Returns:
        重複のないメモのリスト
    """
    seen: set[str] = set()
    result: list[Memo] = []
    for memo in memos:
        if memo.id in seen:
            continue
        seen.add(memo.id)
        result.append(memo)
    return result


def search_pattern(query: str) -> str:
    """ILIKE 用の部分一致パターンを作る"""
    return f"%{query.lower()}%"


@contextmanager
def _store_errors(action: str) -> Iterator[None]:
    """SQLAlchemy の例外を StoreError に変換してログに残す

    Args:
        action: ログに出す操作名
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Error %s: %s", action, e)
        raise StoreError(f"Failed {action}: {e}") from e


class SQLMemoRepository:
    """SQLAlchemy 版 MemoRepository 実装

    memos テーブルに対する CRUD と検索を行う。
    操作ごとに新しいセッションを開き、状態やキャッシュは持たない。
    """

    def __init__(
        self,
        session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]],
    ) -> None:
        """初期化

        Args:
            session_factory: 非同期セッション生成関数
        """
        self._session_factory = session_factory

    async def list_all(self) -> list[Memo]:
        """全メモを作成日時降順で取得"""
        with _store_errors("fetching memos"):
            async with self._session_factory() as session:
                stmt = select(MemoModel).order_by(
                    MemoModel.created_at.desc()  # type: ignore[union-attr]
                )
                result = await session.exec(stmt)
                return [normalize_memo(row) for row in result.all()]

    async def create(self, form: MemoFormData) -> Memo:
        """メモを作成

        Args:
            form: 入力値

        Returns:
            作成されたメモ

        Raises:
            StoreError: 挿入に失敗した場合、または挿入した行を読み出せない場合
        """
        with _store_errors("adding memo"):
            async with self._session_factory() as session:
                result = await session.execute(
                    insert(MemoModel)
                    .values(**self._form_values(form))
                    .returning(MemoModel.id)
                )
                memo_id = result.scalar_one_or_none()
                await session.commit()
                model = (
                    await session.get(MemoModel, memo_id)
                    if memo_id is not None
                    else None
                )

        if model is None:
            logger.error("Error adding memo: store returned no row")
            raise StoreError("Failed to create memo", code=StoreError.NO_ROW)
        return normalize_memo(model)

    async def update(self, memo_id: str, form: MemoFormData) -> Memo:
        """メモを上書き更新

        updated_at はデータストア側で更新される。

        Args:
            memo_id: 更新するメモの ID
            form: 入力値

        Returns:
            更新後のメモ

        Raises:
            StoreError: 対象が存在しない場合、またはクエリに失敗した場合
        """
        with _store_errors("updating memo"):
            async with self._session_factory() as session:
                result = await session.execute(
                    update(MemoModel)
                    .where(MemoModel.id == memo_id)  # type: ignore[arg-type]
                    .values(**self._form_values(form))
                )
                await session.commit()
                model = None
                if result.rowcount:  # type: ignore[union-attr]
                    model = await session.get(MemoModel, memo_id)

        if model is None:
            logger.error("Error updating memo: no memo with id %s", memo_id)
            raise StoreError(
                f"Memo not found: {memo_id}", code=StoreError.NOT_FOUND
            )
        return normalize_memo(model)

    async def delete_by_id(self, memo_id: str) -> None:
        """メモを削除

        存在しない ID の場合も成功として扱う。

        Args:
            memo_id: 削除するメモの ID
        """
        with _store_errors("deleting memo"):
            async with self._session_factory() as session:
                await session.execute(
                    delete(MemoModel).where(
                        MemoModel.id == memo_id  # type: ignore[arg-type]
                    )
                )
                await session.commit()

    async def get_by_id(self, memo_id: str) -> Memo | None:
        """ID でメモを検索

        Args:
            memo_id: メモの ID

        Returns:
            見つかったメモ、または None
        """
        with _store_errors("fetching memo by ID"):
            async with self._session_factory() as session:
                model = await session.get(MemoModel, memo_id)
                if model is None:
                    return None
                return normalize_memo(model)

    async def list_by_category(self, category: str) -> list[Memo]:
        """カテゴリ完全一致でメモを作成日時降順に取得

        Args:
            category: カテゴリ値

        Returns:
            メモのリスト
        """
        with _store_errors("fetching memos by category"):
            async with self._session_factory() as session:
                stmt = (
                    select(MemoModel)
                    .where(MemoModel.category == category)
                    .order_by(MemoModel.created_at.desc())  # type: ignore[union-attr]
                )
                result = await session.exec(stmt)
                return [normalize_memo(row) for row in result.all()]

    async def search(self, query: str) -> list[Memo]:
        """タイトル・本文・タグでメモを検索

        タイトルと本文はデータストア側で大文字小文字を区別せず部分一致検索する。
        タグはその結果に対してクライアント側で絞り込むため、
        タイトルか本文にも一致したメモのタグしか対象にならない。

        Args:
            query: 検索文字列

        Returns:
            ID で重複排除したメモのリスト（作成日時降順）
        """
        pattern = search_pattern(query)
        with _store_errors("searching memos"):
            async with self._session_factory() as session:
                stmt = (
                    select(MemoModel)
                    .where(
                        or_(
                            MemoModel.title.ilike(pattern),  # type: ignore[attr-defined]
                            MemoModel.content.ilike(pattern),  # type: ignore[attr-defined]
                        )
                    )
                    .order_by(MemoModel.created_at.desc())  # type: ignore[union-attr]
                )
                result = await session.exec(stmt)
                matched = [normalize_memo(row) for row in result.all()]

        tag_matched = [memo for memo in matched if memo.has_tag_containing(query)]
        return unique_by_id(matched + tag_matched)

    async def clear_all(self) -> None:
        """全メモを削除"""
        with _store_errors("clearing all memos"):
            async with self._session_factory() as session:
                await session.execute(
                    delete(MemoModel).where(
                        MemoModel.id != ""  # type: ignore[arg-type]
                    )
                )
                await session.commit()
        logger.info("Cleared all memos")

    @staticmethod
    def _form_values(form: MemoFormData) -> dict[str, Any]:
        """入力値を列の値に変換"""
        return {
            "title": form.title,
            "content": form.content,
            "category": form.category,
            "tags": list(form.tags) if form.tags else [],
        }
