"""Logging utilities for qlight."""
import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional


DEFAULT_LEVEL_ENV = "QLIGHT_LOG_LEVEL"


class QlightFormatter(logging.Formatter):
    """Custom formatter for qlight logs.

    Format: [{level[0]} {time} {module_basename[:9]}] {message}
    Example: [W 14:23:45.123 osc      ] Ignoring message for unknown OSC path: /foo
    """

    def format(self, record):
        level_char = record.levelname[0]

        # Module basename, truncated and padded
        module_name = record.name.split('.')[-1]
        module_padded = module_name[:9].ljust(9)

        timestamp = self.formatTime(record, "%H:%M:%S")
        msecs = f"{record.msecs:03.0f}"

        prefix = f"[{level_char} {timestamp}.{msecs} {module_padded}]"
        message = record.getMessage()
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"

        return f"{prefix} {message}"


def _level(name: Optional[str], default: int) -> int:
    if not name:
        return default
    return getattr(logging, str(name).upper(), default)


def get_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Get logger for a qlight component.

    Handlers are installed once, on the root logger, by setup_logging();
    component loggers only carry an optional level override.

    Args:
        name: Component name (usually __name__)
        level: Optional level override (DEBUG/INFO/WARNING/ERROR)
               Falls back to QLIGHT_LOG_LEVEL env var; with neither set the
               logger inherits the root level

    Example:
        >>> from qlight.log import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Listening to 0.0.0.0:9000")
    """
    logger = logging.getLogger(name)

    # Set level from: parameter > env var > inherited
    if level is None:
        level = os.getenv(DEFAULT_LEVEL_ENV)
    if level:
        logger.setLevel(_level(level, logging.INFO))
    return logger


def setup_logging(config: Optional[dict] = None, console_level: Optional[str] = None) -> None:
    """
    Configure the root logger with a console handler and optional file handler.

    The console level comes from, in order: the console_level argument,
    logging.console_level in config, the QLIGHT_LOG_LEVEL environment variable,
    then INFO. A rotating file handler is added when logging.file is set.

    Args:
        config: Configuration dict (the 'logging' section is used)
        console_level: Level name overriding the configured console level
    """
    logging_config = (config or {}).get('logging') or {}

    formatter = QlightFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_level = (console_level
                     or logging_config.get('console_level')
                     or os.getenv(DEFAULT_LEVEL_ENV, 'INFO'))
    console_handler.setLevel(_level(console_level, logging.INFO))
    console_handler.setFormatter(formatter)

    handlers = [console_handler]

    log_file = logging_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=logging_config.get('max_bytes', 10485760),  # 10MB default
            backupCount=logging_config.get('backup_count', 5)
        )
        file_handler.setLevel(_level(logging_config.get('file_level'), logging.DEBUG))
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers to avoid duplicates
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    for handler in handlers:
        root_logger.addHandler(handler)
