"""mmsetup 日志配置

日志统一写 stderr，与进度显示（stdout）分开。级别和格式由环境变量决定:
    MMSETUP_LOG_LEVEL   未设置时默认 WARNING，--verbose 下默认 INFO
    MMSETUP_LOG_JSON=1  每条记录输出一行 JSON
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Mapping

LEVEL_ENV = "MMSETUP_LOG_LEVEL"
JSON_ENV = "MMSETUP_LOG_JSON"
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """单行 JSON 记录，便于 CI 收集"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def resolve_level(verbose: bool, environ: Mapping[str, str] | None = None) -> int:
    env = os.environ if environ is None else environ
    default = "INFO" if verbose else "WARNING"
    name = env.get(LEVEL_ENV, "").strip().upper() or default
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.getLevelName(default)


def setup_logging(verbose: bool = False, environ: Mapping[str, str] | None = None) -> None:
    """配置根日志器，重复调用只保留一个 handler"""
    env = os.environ if environ is None else environ
    reset_logging()
    root = logging.getLogger()
    root.setLevel(resolve_level(verbose, env))

    handler = logging.StreamHandler(sys.stderr)
    if env.get(JSON_ENV, "") == "1":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)


def reset_logging() -> None:
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
