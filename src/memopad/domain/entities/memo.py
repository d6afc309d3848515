"""Memo entity for user notes."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class MemoCategory(str, Enum):
    """メモのカテゴリ"""

    PERSONAL = "personal"
    WORK = "work"
    STUDY = "study"
    IDEA = "idea"
    OTHER = "other"

    @property
    def label(self) -> str:
        """表示用ラベル"""
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS: dict[MemoCategory, str] = {
    MemoCategory.PERSONAL: "Personal",
    MemoCategory.WORK: "Work",
    MemoCategory.STUDY: "Study",
    MemoCategory.IDEA: "Idea",
    MemoCategory.OTHER: "Other",
}

FALLBACK_CATEGORY_LABEL = _CATEGORY_LABELS[MemoCategory.OTHER]


def category_label(category: str) -> str:
    """カテゴリ値から表示用ラベルを取得する

    未知のカテゴリは保存値をそのまま残し、表示だけフォールバックラベルにする。

    Args:
        category: カテゴリ値

    Returns:
        表示用ラベル
    """
    try:
        return MemoCategory(category).label
    except ValueError:
        return FALLBACK_CATEGORY_LABEL


@dataclass(frozen=True)
class Memo:
    """メモエンティティ

    データストアから読み出して正規化済みのメモ。
    tags と日時は常に値を持つ。

    Attributes:
        id: メモの一意識別子（データストアが採番）
        title: タイトル
        content: 本文（Markdown）
        category: カテゴリ値（未知の値もそのまま保持する）
        tags: タグリスト（表示順を保持）
        created_at: 作成日時
        updated_at: 更新日時
    """

    id: str
    title: str
    content: str
    category: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    @property
    def category_label(self) -> str:
        """カテゴリの表示用ラベル"""
        return category_label(self.category)

    def has_tag_containing(self, query: str) -> bool:
        """query を大文字小文字を区別せず含むタグがあるかどうか

        Args:
            query: 検索文字列

        Returns:
            一致するタグがある場合 True
        """
        needle = query.lower()
        return any(needle in tag.lower() for tag in self.tags)


@dataclass(frozen=True)
class MemoFormData:
    """メモの作成・更新時の入力値

    Attributes:
        title: タイトル（空白のみは不可）
        content: 本文
        category: カテゴリ値
        tags: タグリスト（省略時は空リスト）
    """

    title: str
    content: str = ""
    category: str = MemoCategory.OTHER.value
    tags: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        """バリデーション"""
        if not self.title.strip():
            raise ValueError("Title cannot be empty")
        if not isinstance(self.content, str):
            raise ValueError("Content must be a string")
        if not isinstance(self.category, str):
            raise ValueError("Category must be a string")
        if self.tags is None:
            object.__setattr__(self, "tags", [])
        elif not isinstance(self.tags, list) or not all(
            isinstance(tag, str) for tag in self.tags
        ):
            raise ValueError("Tags must be a list of strings")
