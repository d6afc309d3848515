"""SQLModel table definitions."""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import JSON, Column, DateTime, func
from sqlmodel import Field, SQLModel


def _new_memo_id() -> str:
    return str(uuid4())


class MemoModel(SQLModel, table=True):
    """メモテーブル

    id と日時はデータストア側で採番・設定する。
    tags と日時は NULL を許容し、読み出し時に正規化する。
    日時はタイムゾーンなし（UTC）で保存する。
    """

    __tablename__ = "memos"

    id: str = Field(default_factory=_new_memo_id, primary_key=True)
    title: str
    content: str = ""
    category: str = Field(index=True)
    tags: list[str] | None = Field(default=None, sa_column=Column(JSON))
    created_at: datetime | None = Field(
        default=None,
        sa_type=DateTime,
        sa_column_kwargs={"server_default": func.now()},
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_type=DateTime,
        sa_column_kwargs={"server_default": func.now(), "onupdate": func.now()},
    )
