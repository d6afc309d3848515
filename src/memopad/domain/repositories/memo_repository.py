"""MemoRepository Protocol."""

from typing import Protocol

from memopad.domain.entities.memo import Memo, MemoFormData


class MemoRepository(Protocol):
    """メモリポジトリ

    すべての操作は失敗時に StoreError を送出する。
    """

    async def list_all(self) -> list[Memo]:
        """全メモを取得

        作成日時降順でソート。

        Returns:
            メモのリスト
        """
        ...

    async def create(self, form: MemoFormData) -> Memo:
        """メモを作成

        Args:
            form: 入力値

        Returns:
            データストアが採番した ID と日時を持つメモ
        """
        ...

    async def update(self, memo_id: str, form: MemoFormData) -> Memo:
        """メモを上書き更新

        Args:
            memo_id: 更新するメモの ID
            form: 入力値

        Returns:
            更新後のメモ

        Raises:
            StoreError: 対象が存在しない場合（code は not_found）
        """
        ...

    async def delete_by_id(self, memo_id: str) -> None:
        """メモを削除

        存在しない ID を指定してもエラーにしない。

        Args:
            memo_id: 削除するメモの ID
        """
        ...

    async def get_by_id(self, memo_id: str) -> Memo | None:
        """ID でメモを検索

        Args:
            memo_id: メモの ID

        Returns:
            見つかったメモ、または None
        """
        ...

    async def list_by_category(self, category: str) -> list[Memo]:
        """カテゴリでメモを絞り込む

        作成日時降順でソート。

        Args:
            category: カテゴリ値（完全一致）

        Returns:
            メモのリスト
        """
        ...

    async def search(self, query: str) -> list[Memo]:
        """タイトル・本文・タグでメモを検索

        Args:
            query: 検索文字列

        Returns:
            ID で重複排除したメモのリスト
        """
        ...

    async def clear_all(self) -> None:
        """全メモを削除（管理用途）"""
        ...
