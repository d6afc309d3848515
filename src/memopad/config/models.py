"""設定データクラス"""

from dataclasses import dataclass


@dataclass
class DatabaseConfig:
    """データベース接続設定

    url と database_path のどちらかを指定する。両方ある場合は url を優先する。

    Attributes:
        url: SQLAlchemy 非同期接続 URL
        database_path: SQLite データベースファイルのパス
    """

    url: str | None = None
    database_path: str | None = None


@dataclass
class ServerConfig:
    """HTTP サーバー設定"""

    host: str = "0.0.0.0"
    port: int = 8080


@dataclass
class LoggingConfig:
    """ログ設定"""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    loggers: dict[str, str] | None = None


@dataclass
class Config:
    """アプリケーション設定"""

    database: DatabaseConfig
    server: ServerConfig
    logging: LoggingConfig | None = None
