"""設定管理モジュール"""

from memopad.config.loader import (
    CONFIG_PATH_ENV,
    ConfigError,
    ConfigValidationError,
    EnvironmentVariableError,
    expand_env_vars,
    load_config,
    resolve_config_path,
)
from memopad.config.models import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    ServerConfig,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "Config",
    "ConfigError",
    "ConfigValidationError",
    "DatabaseConfig",
    "EnvironmentVariableError",
    "LoggingConfig",
    "ServerConfig",
    "expand_env_vars",
    "load_config",
    "resolve_config_path",
]
