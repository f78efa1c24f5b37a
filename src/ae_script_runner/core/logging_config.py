"""
Logging setup for AE Script Runner

Everything the runner logs goes to stderr. Output that After Effects
writes to stdout while running a script is forwarded through the
``ae_script_runner.core.process`` logger at INFO level.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, MutableMapping, Optional, Tuple

from .env_config import config as env_config

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUPS = 3

# Attributes every LogRecord carries; anything else arrived through ``extra``
_RESERVED_ATTRS = set(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields copied in"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        entry.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and key not in entry
        )

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Terminal formatter that colours the level name"""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if not color:
            return super().format(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _console_handler(level: int, use_json: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if use_json:
        handler.setFormatter(StructuredFormatter())
    elif sys.stderr.isatty():
        handler.setFormatter(ColoredFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def _file_handler(log_file: Path, level: int) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    # Files are always JSON lines
    handler.setFormatter(StructuredFormatter())
    return handler


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
    use_json: Optional[bool] = None,
    console_enabled: bool = True,
) -> None:
    """
    Configure the root logger for a command-line run

    Unset arguments fall back to the ``AE_RUNNER_LOG_*`` environment
    variables. Calling this again replaces the previous handlers.

    Args:
        log_level: Level name such as DEBUG or WARNING
        log_file: Also write JSON lines to this rotating file
        use_json: Write JSON lines to the console instead of text
        console_enabled: Attach the stderr handler
    """
    log_level = log_level or env_config.AE_RUNNER_LOG_LEVEL
    if log_file is None and env_config.AE_RUNNER_LOG_FILE:
        log_file = Path(env_config.AE_RUNNER_LOG_FILE).expanduser()
    if use_json is None:
        use_json = env_config.AE_RUNNER_LOG_JSON

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()

    if console_enabled:
        root.addHandler(_console_handler(level, use_json))
    if log_file is not None:
        root.addHandler(_file_handler(log_file, level))

    configure_module_loggers(level)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"log_level": log_level, "log_file": str(log_file) if log_file else None, "use_json": use_json},
    )


def configure_module_loggers(default_level: int) -> None:
    """Set levels for the runner's own loggers and silence asyncio chatter"""
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    # Connectors log under "connector.<name>"
    for name in ("ae_script_runner", "connector"):
        logging.getLogger(name).setLevel(default_level)


class ServiceLoggerAdapter(logging.LoggerAdapter):
    """Tags every record with the service it was logged for"""

    def __init__(self, logger: logging.Logger, service: str):
        super().__init__(logger, {"service": service})
        self.service = service

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), "service": self.service}
        return msg, kwargs


def get_logger(name: str, service: Optional[str] = None):
    """
    Logger for ``name``, wrapped so records carry ``service`` when given
    """
    logger = logging.getLogger(name)
    if service:
        return ServiceLoggerAdapter(logger, service)
    return logger
