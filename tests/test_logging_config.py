import logging

import pytest

from src.utils.logging_config import QUIET_LOGGERS, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        handler.close()
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:
    def test_creates_log_files(self, tmp_path, restore_root_logger):
        log_dir = tmp_path / "logs"
        setup_logging(str(log_dir), "debug")

        logging.getLogger("src.test").error("boom")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "boom" in (log_dir / "expenses_bot.log").read_text(encoding="utf-8")
        assert "boom" in (log_dir / "errors.log").read_text(encoding="utf-8")
        assert logging.getLogger().level == logging.DEBUG

    def test_errors_log_skips_info(self, tmp_path, restore_root_logger):
        setup_logging(str(tmp_path), "INFO")
        logging.getLogger("src.test").info("just info")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "just info" not in (tmp_path / "errors.log").read_text(encoding="utf-8")

    def test_quiets_noisy_libraries(self, tmp_path, restore_root_logger):
        setup_logging(str(tmp_path))
        for name, level in QUIET_LOGGERS.items():
            assert logging.getLogger(name).level == level
