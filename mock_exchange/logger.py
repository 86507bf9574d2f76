# mock_exchange/logger.py
"""
Logging setup

Console logs are either human readable or one JSON object per line with
``ts``, ``level``, ``logger``, ``msg`` and whatever was passed as ``extra``.
"""

import datetime
import json
import logging
import sys
from typing import Iterable

# attributes every LogRecord carries; anything else came in through extra=
_RESERVED = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}

LOGGER_NAMES = ("mock_exchange", "gateway")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.datetime.now(datetime.timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for k, v in record.__dict__.items():
            if k not in _RESERVED and not k.startswith("_"):
                payload[k] = v
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class ExtraFormatter(logging.Formatter):
    """Plain text formatter that appends extra fields as key=value"""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        extras = " ".join(
            f"{k}={v}" for k, v in record.__dict__.items()
            if k not in _RESERVED and not k.startswith("_")
        )
        return f"{line} {extras}" if extras else line


def setup_logging(level: str = "INFO", json_output: bool = True,
                  names: Iterable[str] = LOGGER_NAMES) -> None:
    """
    Attach a stdout handler to the project loggers

    Safe to call more than once; existing handlers are replaced.
    """
    handler = logging.StreamHandler(sys.stdout)
    if json_output:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ExtraFormatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))

    for name in names:
        logger = logging.getLogger(name)
        logger.setLevel(level.upper())
        logger.handlers = [handler]
        logger.propagate = False
