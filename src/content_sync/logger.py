"""Logging setup for the CLI and for long-running service use.

The CLI writes diagnostics to stderr because stdout carries command output
(including ``--json`` payloads). Service mode writes to a file only.
"""

import json
import logging
import os
import sys

DEFAULT_SERVICE_LOG = "/tmp/content-sync.log"

_TEXT_FORMAT = "[%(asctime)s] [%(levelname)s] %(message)s"
_FILE_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty at INFO/DEBUG; raised to WARNING unless the caller asked for DEBUG.
_QUIET_LOGGERS = ("urllib3", "httpx", "httpcore", "charset_normalizer")


class JsonFormatter(logging.Formatter):
    """Render each record as one JSON line.

    Keys are ``ts``, ``level``, ``logger`` and ``msg``; a traceback, when the
    record carries one, goes under ``exc``.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _resolve_level(mode: str, debug: bool, level: str | None) -> int:
    """Pick the root level: debug flag, then LOG_LEVEL, then config, then mode default."""
    if debug:
        return logging.DEBUG
    fallback = level or ("WARNING" if mode == "service" else "INFO")
    name = os.getenv("LOG_LEVEL", fallback).upper()
    resolved = logging.getLevelName(name)
    return resolved if isinstance(resolved, int) else logging.INFO


def _formatted(
    handler: logging.Handler, debug_format: str, fmt: str
) -> logging.Handler:
    if debug_format == "json":
        handler.setFormatter(JsonFormatter(datefmt=_DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt, datefmt=_DATE_FORMAT))
    return handler


def _cli_handlers(
    log_file: str | None, debug_format: str
) -> list[logging.Handler]:
    handlers = [
        _formatted(logging.StreamHandler(sys.stderr), debug_format, _TEXT_FORMAT)
    ]
    if log_file:
        handlers.append(
            _formatted(
                logging.FileHandler(log_file, mode="a"), debug_format, _FILE_FORMAT
            )
        )
    return handlers


def setup_logging(
    mode: str = "cli",
    debug: bool = False,
    log_file: str | None = None,
    debug_format: str = "text",
    level: str | None = None,
) -> None:
    """
    Configure the root logger for a CLI run or a service process.

    Args:
        mode: ``"cli"`` logs to stderr (plus ``log_file`` when given);
            ``"service"`` logs to a file only.
        debug: Force DEBUG regardless of any configured level.
        log_file: Log file path. In service mode it beats ``LOG_FILE``.
        debug_format: ``"text"`` or ``"json"`` (CLI handlers only).
        level: Level name from the YAML config; ``LOG_LEVEL`` beats it.

    Environment variables:
        LOG_LEVEL: DEBUG, INFO, WARNING or ERROR. Unknown names mean INFO.
            Without it the level is ``level``, else WARNING for service
            mode and INFO for the CLI.
        LOG_FILE: Service-mode log file, default ``/tmp/content-sync.log``.
    """
    log_level = _resolve_level(mode, debug, level)

    if mode == "service":
        logging.basicConfig(
            level=log_level,
            format=_TEXT_FORMAT,
            datefmt=_DATE_FORMAT,
            filename=log_file or os.getenv("LOG_FILE", DEFAULT_SERVICE_LOG),
            filemode="a",
        )
    else:
        logging.basicConfig(
            level=log_level, handlers=_cli_handlers(log_file, debug_format)
        )

    if log_level != logging.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
