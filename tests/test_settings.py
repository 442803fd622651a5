import logging
import os

from transcribeasy.core.settings import config
from transcribeasy.core.settings import (
    APP_NAME,
    get_config_dir,
    get_data_dir,
    get_log_level,
    get_models_dir,
)


class TestDirectories:
    def test_dirs_are_created_under_app_name(self):
        for directory in (get_config_dir(), get_data_dir()):
            assert directory.is_dir()
            assert directory.name == APP_NAME

    def test_dirs_stay_in_test_sandbox(self):
        assert str(get_data_dir()).startswith(os.environ["XDG_DATA_HOME"])
        assert str(get_config_dir()).startswith(os.environ["XDG_CONFIG_HOME"])

    def test_models_dir_is_below_data_dir(self):
        assert get_models_dir() == get_data_dir() / "models"


class TestLogLevel:
    def test_known_level(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "warning")
        assert get_log_level() == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, monkeypatch):
        monkeypatch.setattr(config, "LOG_LEVEL", "LOUD")
        assert get_log_level() == logging.INFO
