import logging
from logging.handlers import RotatingFileHandler

from transcribeasy.utils.logger import (
    ROOT_LOGGER_NAME,
    get_log_dir,
    get_logger,
    shutdown_logging,
)


def test_module_loggers_share_the_application_root():
    logger = get_logger("transcribeasy.core.models.manager")
    root = logging.getLogger(ROOT_LOGGER_NAME)

    assert logger.name == "transcribeasy.core.models.manager"
    assert any(isinstance(h, RotatingFileHandler) for h in root.handlers)
    assert root.propagate is False


def test_src_prefix_is_stripped():
    assert get_logger("src.transcribeasy.ui").name == "transcribeasy.ui"


def test_log_file_lives_in_log_dir():
    get_logger(__name__)
    root = logging.getLogger(ROOT_LOGGER_NAME)
    file_handler = next(h for h in root.handlers if isinstance(h, RotatingFileHandler))

    assert file_handler.baseFilename.startswith(str(get_log_dir()))


def test_shutdown_releases_handlers_and_reconfigures_on_next_use():
    shutdown_logging()
    assert logging.getLogger(ROOT_LOGGER_NAME).handlers == []

    get_logger("transcribeasy.test")

    assert logging.getLogger(ROOT_LOGGER_NAME).handlers
