import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List

from platformdirs import user_log_path

ROOT_LOGGER_NAME = "transcribeasy"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured = False


def get_log_dir() -> Path:
    log_dir = user_log_path(ROOT_LOGGER_NAME, appauthor=False)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _build_handlers(level: int, to_console: bool) -> List[logging.Handler]:
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = [
        RotatingFileHandler(
            get_log_dir() / "app.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
    ]
    if to_console:
        handlers.append(logging.StreamHandler(sys.stderr))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
    return handlers


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Return a logger below the application root, configuring the root once."""
    global _configured

    if name.startswith("src."):
        name = name[len("src.") :]

    if not _configured:
        from ..core.settings.config import LOG_TO_CONSOLE, get_log_level

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        if not root_logger.handlers:
            level = get_log_level()
            root_logger.setLevel(level)
            for handler in _build_handlers(level, LOG_TO_CONSOLE):
                root_logger.addHandler(handler)
            root_logger.propagate = False
        _configured = True

    return logging.getLogger(name)


def shutdown_logging() -> None:
    """Shutdown logging and close all file handlers to release file locks."""
    global _configured
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    _configured = False
