"""
test_logging_config.py — Tests for app/logging_config.py

Verifies the Loguru sinks chosen per environment and that the services'
stdlib loggers ("pipeline.*") end up in Loguru.

Called by: pytest
Depends on: app/logging_config.py
"""

import logging
from unittest.mock import patch

import pytest
from loguru import logger

from app.logging_config import _is_production, setup_logging

DEV_URL = "http://localhost:8000"
PROD_URL = "https://pipeline.example.com"


@pytest.fixture(autouse=True)
def _clean_loguru():
    logger.remove()
    yield
    logger.remove()


@pytest.mark.parametrize(
    "url, expected",
    [
        (PROD_URL, True),
        ("https://localhost:8443", False),
        (DEV_URL, False),
        ("", False),
    ],
)
def test_is_production(url, expected):
    assert _is_production(url) is expected


def test_dev_sink_is_colorized():
    with patch("loguru.logger.add") as mock_add:
        setup_logging(app_url=DEV_URL, log_file="")
    assert mock_add.call_count == 1
    assert mock_add.call_args.kwargs.get("colorize") is True
    assert not mock_add.call_args.kwargs.get("serialize")


def test_production_sink_is_json():
    with patch("loguru.logger.add") as mock_add:
        setup_logging(app_url=PROD_URL, log_file="")
    assert mock_add.call_args.kwargs.get("serialize") is True


def test_log_file_adds_rotating_sink(tmp_path):
    path = str(tmp_path / "pipeline.log")
    with patch("loguru.logger.add") as mock_add:
        setup_logging(app_url=DEV_URL, log_file=path)
    assert mock_add.call_count == 2
    file_call = mock_add.call_args_list[1]
    assert file_call.args[0] == path
    assert file_call.kwargs.get("rotation") == "20 MB"


def test_level_is_uppercased():
    with patch("loguru.logger.add") as mock_add:
        setup_logging(level="error", app_url=DEV_URL, log_file="")
    assert mock_add.call_args.kwargs.get("level") == "ERROR"


def test_service_loggers_routed_to_loguru():
    setup_logging(app_url=DEV_URL, log_file="")

    messages = []
    logger.add(lambda m: messages.append(str(m)), format="{message}")

    logging.getLogger("pipeline.metrics").warning("funnel built for %d opportunities", 3)

    assert any("funnel built for 3 opportunities" in m for m in messages)


def test_noisy_loggers_quieted():
    setup_logging(app_url=DEV_URL, log_file="")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
