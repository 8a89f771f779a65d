import logging

from finance_tracker import config
from finance_tracker.logging_config import APP_LOGGER_NAME, get_logger, setup_logging


def test_levels_come_from_config(monkeypatch):
    monkeypatch.setattr(config, "APP_LOG_LEVEL", "DEBUG")
    monkeypatch.setattr(config, "THIRD_PARTY_LOG_LEVEL", "ERROR")
    monkeypatch.setattr(config, "LOG_FILE", None)

    logger = setup_logging()

    assert logger.level == logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.ERROR
    assert logging.getLogger("uvicorn.access").level == logging.ERROR


def test_arguments_override_config_and_write_file(monkeypatch, tmp_path):
    monkeypatch.setattr(config, "APP_LOG_LEVEL", "ERROR")
    log_file = tmp_path / "logs" / "app.log"

    logger = setup_logging(app_log_level="INFO", log_file=str(log_file))
    get_logger("finance_tracker.crud.crud_budget").info("Upserted budget")
    for handler in logger.handlers:
        handler.flush()

    assert logger.level == logging.INFO
    assert "finance_tracker.crud.crud_budget - INFO - Upserted budget" in log_file.read_text()
    setup_logging(log_file=None)


def test_repeated_setup_does_not_stack_handlers(monkeypatch):
    monkeypatch.setattr(config, "LOG_FILE", None)

    setup_logging()
    logger = setup_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_get_logger_prefixes_foreign_names():
    assert get_logger("scripts.purge").name == f"{APP_LOGGER_NAME}.scripts.purge"
    assert get_logger("finance_tracker.main").name == "finance_tracker.main"
    assert get_logger().name == APP_LOGGER_NAME
