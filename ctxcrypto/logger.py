# ctxcrypto/logger.py

import json
import logging
import os
import sys
import time

LOG_LEVEL_ENV = "CTXCRYPTO_LOG_LEVEL"


class JsonFormatter(logging.Formatter):
    """One JSON object per record; message and traceback are escaped by json.dumps."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def get_logger(name: str = "ctxcrypto", level=None) -> logging.Logger:
    """
    JSON-line logger on stderr with UTC timestamps, for the CLI.

    Library modules only call logging.getLogger(__name__); this attaches the
    handler to the package logger so their records come out here too.
    """
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    logger = logging.getLogger(name)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        logger.addHandler(handler)
    else:
        # follow the current stderr; it is swapped under redirection
        for handler in logger.handlers:
            if isinstance(handler, logging.StreamHandler):
                handler.setStream(sys.stderr)

    return logger
