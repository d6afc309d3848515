"""Database management."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from memopad.config.models import DatabaseConfig

# Import models to register them with SQLModel metadata
from memopad.infrastructure.persistence import models as _models  # noqa: F401

logger = logging.getLogger(__name__)

SQLITE_URL_PREFIX = "sqlite+aiosqlite:///"


def database_url_from_path(database_path: str) -> str:
    """SQLite ファイルパスから非同期接続 URL を組み立てる

    Args:
        database_path: SQLite データベースファイルのパス（":memory:" 可）

    Returns:
        aiosqlite 用の接続 URL
    """
    return f"{SQLITE_URL_PREFIX}{database_path}"


def _unicode_lower(value: Any) -> Any:
    if isinstance(value, str):
        return value.lower()
    return value


def install_unicode_lower(engine: AsyncEngine) -> None:
    """SQLite の lower() を Unicode 対応の実装に置き換える

    組み込みの lower() と LIKE は ASCII しか大文字小文字を区別しないため、
    接続ごとに Python の str.lower を登録する。

    Args:
        engine: SQLite の非同期エンジン
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _register_lower(dbapi_connection: Any, connection_record: Any) -> None:
        dbapi_connection.create_function("lower", 1, _unicode_lower)


class DatabaseManager:
    """データベース管理

    データベースの初期化、エンジン生成、セッション管理を行う。
    SQLAlchemy の非同期エンジンで扱える任意の URL を受け付け、
    既定では aiosqlite を使用する。
    """

    def __init__(self, database_url: str) -> None:
        """初期化

        Args:
            database_url: SQLAlchemy 非同期接続 URL
                          "sqlite+aiosqlite:///:memory:" でインメモリDBを使用
        """
        self._database_url = database_url
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None

    @classmethod
    def from_path(cls, database_path: str) -> "DatabaseManager":
        """SQLite ファイルパスから生成する

        Args:
            database_path: SQLite データベースファイルのパス

        Returns:
            DatabaseManager インスタンス
        """
        return cls(database_url_from_path(database_path))

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> "DatabaseManager":
        """設定から生成する

        url が優先され、なければ database_path の SQLite ファイルを使う。

        Args:
            config: データベース接続設定

        Returns:
            DatabaseManager インスタンス
        """
        if config.url:
            return cls(config.url)
        assert config.database_path is not None
        return cls.from_path(config.database_path)

    def get_engine(self) -> AsyncEngine:
        """SQLAlchemy 非同期エンジンを取得する

        エンジンは遅延初期化され、キャッシュされる。
        SQLite ファイルの親ディレクトリが存在しない場合は自動作成する。

        Returns:
            AsyncEngine インスタンス
        """
        if self._engine is not None:
            return self._engine

        is_sqlite = self._database_url.startswith(SQLITE_URL_PREFIX)
        if is_sqlite:
            db_path = self._database_url[len(SQLITE_URL_PREFIX) :]
            if db_path and db_path != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._engine = create_async_engine(self._database_url)
        if is_sqlite:
            install_unicode_lower(self._engine)
        self._session_factory = async_sessionmaker(
            self._engine, class_=AsyncSession, expire_on_commit=False
        )
        return self._engine

    async def create_tables(self) -> None:
        """テーブルを作成する

        既存のテーブルがある場合は何もしない。
        """
        engine = self.get_engine()
        async with engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """セッションを取得する（async context manager）

        Yields:
            AsyncSession インスタンス
        """
        self.get_engine()  # Ensures _session_factory is initialized
        assert self._session_factory is not None
        async with self._session_factory() as session:
            yield session

    async def is_healthy(self) -> bool:
        """データベースに接続できるか確認する

        Returns:
            SELECT 1 が成功した場合 True
        """
        try:
            async with self.get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Database health check failed: %s", e)
            return False
        return True

    async def close(self) -> None:
        """エンジンを破棄して接続を閉じる"""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None
