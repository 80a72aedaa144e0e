import logging

from dryflow.utils.logger import get_logger, init_logger, set_level


def test_level_comes_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert init_logger("dryflow-test-env").level == logging.DEBUG

    monkeypatch.setenv("LOG_LEVEL", "chatty")
    assert init_logger("dryflow-test-env").level == logging.WARNING


def test_handlers_follow_set_level(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    logger = init_logger("dryflow-test-level")
    assert logger.level == logging.WARNING

    set_level(logging.DEBUG, logger)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)


def test_log_dir_adds_rotating_file(tmp_path):
    logger = init_logger("dryflow-test-file", level=logging.INFO, log_dir=tmp_path / "logs")
    logger.info("loaded %d files", 2)
    for h in logger.handlers:
        h.flush()
    assert "loaded 2 files" in (tmp_path / "logs" / "dryflow.log").read_text(encoding="utf-8")
    for h in logger.handlers:
        h.close()


def test_module_loggers_hang_off_the_project_logger():
    assert get_logger("sandbox").name == "dryflow.sandbox"
