"""Tests for root logger configuration."""

import logging

import pytest

from utils.log_setup import setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    root = logging.getLogger()
    urllib3 = logging.getLogger("urllib3")
    saved = (root.level, urllib3.level)
    yield
    root.setLevel(saved[0])
    urllib3.setLevel(saved[1])


class TestSetupLogging:
    """Test level handling."""

    def test_level_name_case_insensitive(self):
        setup_logging("debug")
        assert logging.getLogger().level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("VERBOSO")
        assert logging.getLogger().level == logging.INFO

    def test_numeric_level(self):
        setup_logging(logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

    def test_urllib3_kept_quiet(self):
        setup_logging("DEBUG")
        assert logging.getLogger("urllib3").level == logging.INFO
