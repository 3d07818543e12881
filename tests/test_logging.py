import logging

import pytest

from arm_auth.utils.logging import setup_logging


@pytest.fixture
def configured():
    loggers = []
    yield loggers.append
    for logger in loggers:
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


def test_console_writes_to_stderr(configured, capsys: pytest.CaptureFixture[str]) -> None:
    configured(setup_logging("INFO"))

    logging.getLogger("arm_auth.session").warning("Authentication failed during acquisition: offline")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert "Authentication failed during acquisition: offline" in captured.err


def test_file_handler_logs_debug(configured, tmp_path) -> None:
    log_file = tmp_path / "arm_auth.log"
    configured(setup_logging("DEBUG", log_file))

    logging.getLogger("arm_auth.auth.msal_auth").debug("Creating public client application")

    assert "Creating public client application" in log_file.read_text()
