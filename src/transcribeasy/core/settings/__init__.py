from .config import (
    CONNECT_TIMEOUT_S,
    DOWNLOAD_CHUNK_SIZE,
    LOG_LEVEL,
    LOG_TO_CONSOLE,
    PROGRESS_UPDATE_INTERVAL_MS,
    READ_TIMEOUT_S,
    get_log_level,
)
from .paths import APP_NAME, get_config_dir, get_data_dir, get_models_dir

__all__ = [
    "APP_NAME",
    "CONNECT_TIMEOUT_S",
    "DOWNLOAD_CHUNK_SIZE",
    "LOG_LEVEL",
    "LOG_TO_CONSOLE",
    "PROGRESS_UPDATE_INTERVAL_MS",
    "READ_TIMEOUT_S",
    "get_config_dir",
    "get_data_dir",
    "get_log_level",
    "get_models_dir",
]
