from .state import (
    ConfigLoader,
    ConfigState,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    StreamingConfig,
    get_config,
)

__all__ = [
    "ConfigLoader",
    "ConfigState",
    "LoggingConfig",
    "ServerConfig",
    "StorageConfig",
    "StreamingConfig",
    "get_config",
]
