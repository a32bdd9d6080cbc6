"""
Logging setup for the vaccine scheduler.

Console output is human readable by default; set LOG_JSON to emit one JSON
object per line instead. Modules log through ``logging.getLogger(__name__)``
and attach structured fields with ``extra={"context": {...}}``.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union


class JSONFormatter(logging.Formatter):
    """Formats a record as a single JSON line, including any ``context`` extra."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "context"):
            log_data["context"] = getattr(record, "context", {})

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ConsoleFormatter(logging.Formatter):
    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        levelname = record.levelname
        record.levelname = f"{color}{levelname:8}{self.RESET}"
        try:
            message = super().format(record)
        finally:
            record.levelname = levelname
        context = getattr(record, "context", None)
        if context:
            message = f"{message} | {context}"
        return message


def setup_logging(
    log_level: Union[int, str] = "INFO",
    use_json_format: bool = False,
    log_file: Optional[str] = None,
    enable_sql_echo: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Level as an int (logging.INFO) or name ("INFO")
        use_json_format: Emit JSON lines on the console instead of plain text
        log_file: Optional path of a rotating log file (always JSON)
        enable_sql_echo: Route SQLAlchemy engine logging through the root logger
    """
    if isinstance(log_level, int):
        level = log_level
    else:
        level = getattr(logging, str(log_level).upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    if use_json_format:
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(
            ConsoleFormatter(
                "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=10 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)
        except OSError as exc:
            root_logger.warning(
                "Failed to create log file handler, logging to console only",
                extra={"context": {"log_file": log_file, "error": str(exc)}},
            )

    if enable_sql_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    logging.getLogger("vaccine_scheduler").info(
        "Logging configured",
        extra={
            "context": {
                "level": logging.getLevelName(level),
                "json_format": use_json_format,
                "log_file": log_file or None,
            }
        },
    )