"""Tests for logging setup."""

import logging

import pytest

from cv_blueprint.utils.logging_config import LOG_FILE, resolve_level, setup_logging


@pytest.fixture
def package_logger():
    logger = logging.getLogger("cv_blueprint")
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)


class TestSetupLogging:
    def test_child_loggers_reach_the_file(self, tmp_path, package_logger):
        setup_logging(str(tmp_path), "debug")

        logging.getLogger("cv_blueprint.merging.engine").debug("Merged cv1 into user-1 v2")
        for handler in package_logger.handlers:
            handler.flush()

        assert package_logger.level == logging.DEBUG
        assert "Merged cv1 into user-1 v2" in (tmp_path / LOG_FILE).read_text(encoding="utf-8")

    def test_reinit_replaces_handlers(self, tmp_path, package_logger):
        setup_logging(str(tmp_path))
        setup_logging(str(tmp_path))
        assert len(package_logger.handlers) == 2


class TestResolveLevel:
    def test_names_and_constants(self):
        assert resolve_level("warning") == logging.WARNING
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_name_falls_back_to_info(self):
        assert resolve_level("chatty") == logging.INFO
