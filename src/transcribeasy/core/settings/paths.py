"""
Application directories.

Uses platformdirs for cross-platform directory resolution.
"""

from pathlib import Path

from platformdirs import user_config_path, user_data_path

APP_NAME = "transcribeasy"


def get_config_dir() -> Path:
    return user_config_path(APP_NAME, appauthor=False, ensure_exists=True)


def get_data_dir() -> Path:
    return user_data_path(APP_NAME, appauthor=False, ensure_exists=True)


def get_models_dir() -> Path:
    return get_data_dir() / "models"
