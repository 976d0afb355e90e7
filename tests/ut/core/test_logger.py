"""日志配置单元测试"""

from __future__ import annotations

import json
import logging

import pytest

from mmsetup.utils.logger import JSONFormatter, reset_logging, resolve_level, setup_logging


@pytest.fixture(autouse=True)
def _clean():
    yield
    reset_logging()
    logging.getLogger().setLevel(logging.WARNING)


class TestResolveLevel:
    @pytest.mark.parametrize(
        ("verbose", "environ", "expected"),
        [
            (False, {}, logging.WARNING),
            (True, {}, logging.INFO),
            (False, {"MMSETUP_LOG_LEVEL": "debug"}, logging.DEBUG),
            (True, {"MMSETUP_LOG_LEVEL": "ERROR"}, logging.ERROR),
            (False, {"MMSETUP_LOG_LEVEL": "LOUD"}, logging.WARNING),
            (True, {"MMSETUP_LOG_LEVEL": "  "}, logging.INFO),
        ],
    )
    def test_levels(self, verbose, environ, expected) -> None:
        assert resolve_level(verbose, environ) == expected


class TestSetupLogging:
    def test_single_handler(self) -> None:
        setup_logging(True, {})
        setup_logging(True, {})
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_json_formatter_selected(self) -> None:
        setup_logging(environ={"MMSETUP_LOG_JSON": "1"})
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_text_formatter_by_default(self) -> None:
        setup_logging(environ={})
        assert not isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)


class TestJSONFormatter:
    def test_fields(self) -> None:
        record = logging.LogRecord(
            "mmsetup.services.build_service", logging.INFO, __file__, 10,
            "构建产物命中: %s", ("mmcv",), None,
        )
        entry = json.loads(JSONFormatter().format(record))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "mmsetup.services.build_service"
        assert entry["msg"] == "构建产物命中: mmcv"
        assert "exc" not in entry
