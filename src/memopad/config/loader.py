"""YAML設定ファイルの読み込みと環境変数展開"""

import os
import re
from pathlib import Path
from typing import Any

import yaml

from memopad.config.models import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
)

# 設定ファイルのパスを上書きする環境変数
CONFIG_PATH_ENV = "MEMOPAD_CONFIG"


class ConfigError(Exception):
    """設定関連の基底例外"""


class ConfigValidationError(ConfigError):
    """設定値のバリデーションエラー"""


class EnvironmentVariableError(ConfigError):
    """環境変数が見つからないエラー"""


# 環境変数パターン: ${VAR_NAME}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def expand_env_vars(value: str) -> str:
    """文字列中の ${VAR_NAME} を環境変数の値に置換する

    Args:
        value: 置換対象の文字列

    Returns:
        環境変数が展開された文字列

    Raises:
        EnvironmentVariableError: 環境変数が未設定
    """
    if not value:
        return value

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            raise EnvironmentVariableError(
                f"Environment variable '{var_name}' is not set"
            )
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, value)


def _expand_recursive(data: Any) -> Any:
    """データ構造を再帰的に走査し、文字列中の環境変数を展開する"""
    if isinstance(data, dict):
        return {key: _expand_recursive(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_expand_recursive(item) for item in data]
    elif isinstance(data, str):
        return expand_env_vars(data)
    else:
        return data


def _validate_required_field(data: dict[str, Any], field: str, parent: str = "") -> Any:
    """必須フィールドの存在を検証する

    Args:
        data: 検証対象のdict
        field: フィールド名
        parent: 親フィールド名（エラーメッセージ用）

    Returns:
        フィールドの値

    Raises:
        ConfigValidationError: フィールドが存在しない
    """
    if field not in data or data[field] is None:
        full_path = f"{parent}.{field}" if parent else field
        raise ConfigValidationError(f"Required field '{full_path}' is missing")
    return data[field]


def _load_database(data: dict[str, Any]) -> DatabaseConfig:
    """database セクションを読み込む

    url と database_path のどちらかが必須。
    """
    database_data = _validate_required_field(data, "database")
    url = database_data.get("url")
    database_path = database_data.get("database_path")
    if not url and not database_path:
        raise ConfigValidationError(
            "Either 'database.url' or 'database.database_path' is required"
        )
    return DatabaseConfig(url=url or None, database_path=database_path or None)


def _load_server(data: dict[str, Any]) -> ServerConfig:
    """server セクションを読み込む（省略時はデフォルト値）"""
    server_data = data.get("server") or {}
    port = server_data.get("port", 8080)
    try:
        port = int(port)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"Invalid server.port: {port!r}") from e
    if not 0 <= port <= 65535:
        raise ConfigValidationError(f"server.port out of range: {port}")
    return ServerConfig(host=server_data.get("host", "0.0.0.0"), port=port)


def resolve_config_path(default: str | Path = "config.yaml") -> Path:
    """設定ファイルのパスを決める

    Args:
        default: 環境変数が未設定の場合のパス

    Returns:
        MEMOPAD_CONFIG が設定されていればそのパス、なければ default
    """
    return Path(os.environ.get(CONFIG_PATH_ENV) or default)


def load_config(path: str | Path) -> Config:
    """設定ファイルを読み込む

    Args:
        path: config.yaml のパス

    Returns:
        Config オブジェクト

    Raises:
        FileNotFoundError: ファイルが存在しない
        ConfigValidationError: 必須項目が欠落
        EnvironmentVariableError: 環境変数が未設定
        yaml.YAMLError: YAML構文エラー
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        raw_data = yaml.safe_load(f)

    if not isinstance(raw_data, dict):
        raise ConfigValidationError("Config file must contain a mapping")

    # 環境変数を展開
    data = _expand_recursive(raw_data)

    database = _load_database(data)
    server = _load_server(data)

    # LoggingConfig (optional)
    logging_config: LoggingConfig | None = None
    logging_data = data.get("logging")
    if logging_data:
        logging_config = LoggingConfig(
            level=logging_data.get("level", "INFO"),
            format=logging_data.get(
                "format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
            loggers=logging_data.get("loggers"),
        )

    return Config(database=database, server=server, logging=logging_config)
