import logging

import pytest

from jobsieve import log


@pytest.fixture
def restore_levels():
    yield
    log.setup_logging("INFO")


def test_setup_logging_quiets_client_libraries(restore_levels):
    log.setup_logging("DEBUG")
    assert logging.getLogger("httpx").level == logging.WARNING

    log.setup_logging("ERROR")
    assert logging.getLogger("httpx").level == logging.ERROR
    assert logging.getLogger("openai").level == logging.ERROR


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    assert log._level("chatty") == logging.INFO
    assert log._level(None) == logging.INFO
    assert log._level("warning") == logging.WARNING


def test_get_logger_returns_named_logger():
    assert log.get_logger("jobsieve.test").name == "jobsieve.test"
