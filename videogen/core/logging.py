import json
import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path


def resolve_log_file() -> Path:
    logs_dir = Path(os.getenv("LOG_DIR", "./logs"))
    return Path(os.getenv("APP_LOG", logs_dir / "videogen.log"))


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
            "process": record.process,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            payload["stack"] = self.formatStack(record.stack_info)
        return json.dumps(payload, ensure_ascii=False)


def _open_file_handler(log_file: Path) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(JsonFormatter())
    return handler


def configure_logging(console_level: str | int | None = None) -> Path | None:
    """Send JSON lines to the app log file and plain text to stderr.

    The file handler records everything at INFO and above. The console handler
    only shows ``console_level`` (``LOG_LEVEL`` when not given) so regular CLI
    output stays readable. When the log file cannot be opened the run keeps
    console logging only and ``None`` is returned. Calling this more than once
    only updates the console level.
    """
    log_file = resolve_log_file()
    root_logger = logging.getLogger()
    level = console_level or os.getenv("LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if getattr(root_logger, "_videogen_logging_configured", False):
        console_handler = getattr(root_logger, "_videogen_console_handler", None)
        if console_handler is not None:
            console_handler.setLevel(level)
        return getattr(root_logger, "_videogen_log_file", None)

    root_logger.setLevel(logging.INFO)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    root_logger.addHandler(console_handler)

    file_error: OSError | None = None
    try:
        root_logger.addHandler(_open_file_handler(log_file))
    except OSError as exc:
        file_error = exc
        log_file = None

    logging.captureWarnings(True)
    setattr(root_logger, "_videogen_logging_configured", True)
    setattr(root_logger, "_videogen_console_handler", console_handler)
    setattr(root_logger, "_videogen_log_file", log_file)
    logger = logging.getLogger(__name__)
    if file_error is not None:
        logger.warning("Log file unavailable, logging to console only: %s", file_error)
    else:
        logger.info("Logging initialized. file=%s", log_file)
    return log_file
