"""日志模块测试"""

import logging
from logging.handlers import RotatingFileHandler
import os
import re

import pytest

from yorder.log import (
    MicrosecondFormatter,
    create_formatter,
    get_logger,
    ordering_logger,
    setup_logger,
    setup_root_logger,
)
from yorder.config import LoggingSettings


@pytest.fixture
def restore_root_logger():
    """还原根日志器的处理器和级别"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    root.propagate = True


class TestGetLogger:
    """get_logger 测试"""

    def test_short_name_gets_prefix(self):
        assert get_logger("ordering").name == "yorder.ordering"

    def test_full_name_kept(self):
        assert get_logger("yorder.ordering").name == "yorder.ordering"
        assert get_logger("sqlalchemy.engine").name == "sqlalchemy.engine"

    def test_infers_module_name(self):
        assert get_logger().name == __name__

    def test_ordering_logger(self):
        assert ordering_logger.name == "yorder.ordering"


class TestSetupLogger:
    """setup_logger 测试"""

    def test_console_only(self):
        log = setup_logger("test_console_only", level="DEBUG", propagate=False)

        assert log.level == logging.DEBUG
        assert len(log.handlers) == 1
        assert isinstance(log.handlers[0], logging.StreamHandler)

    def test_rotating_file(self, temp_dir):
        path = os.path.join(temp_dir, "logs", "ordering.log")
        log = setup_logger(
            "test_rotating_file",
            log_file=path,
            console=False,
            propagate=False,
            file_handler_options={"maxBytes": 1024, "backupCount": 2},
        )
        try:
            log.info("排序操作完成 - 成功更新 1 条记录")
            handler = log.handlers[0]
            handler.flush()

            assert isinstance(handler, RotatingFileHandler)
            assert handler.maxBytes == 1024
            assert handler.backupCount == 2
            with open(path, encoding="utf-8") as f:
                assert "成功更新 1 条记录" in f.read()
        finally:
            for handler in log.handlers:
                handler.close()
            log.handlers.clear()

    def test_setup_clears_existing_handlers(self):
        setup_logger("test_clears_handlers", propagate=False)
        log = setup_logger("test_clears_handlers", propagate=False)
        assert len(log.handlers) == 1

    def test_invalid_level_falls_back_to_info(self):
        log = setup_logger("test_invalid_level", level="verbose", propagate=False)
        assert log.level == logging.INFO


class TestFormatter:
    """格式化器测试"""

    def test_microseconds(self):
        record = logging.LogRecord("yorder", logging.INFO, __file__, 1, "msg", None, None)
        formatted = MicrosecondFormatter("%(asctime)s").format(record)
        assert re.match(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{6}$", formatted)

    def test_plain_formatter(self):
        formatter = create_formatter(use_microseconds=False)
        assert not isinstance(formatter, MicrosecondFormatter)


class TestSetupRootLogger:
    """setup_root_logger 测试"""

    def test_from_settings(self, restore_root_logger):
        root = setup_root_logger(config=LoggingSettings(level="WARNING"))

        assert root is restore_root_logger
        assert root.level == logging.WARNING

    def test_from_yaml(self, restore_root_logger, temp_file):
        path = temp_file("logging.yaml", "logging:\n  level: DEBUG\n  enable_console: false\n")

        root = setup_root_logger(config_path=path)

        assert root.level == logging.DEBUG
        assert root.handlers == []
