"""
Logging setup: colored console output plus one shared log file
"""

import logging
import sys
from datetime import datetime
from typing import Dict
from config.settings import LOG_LEVEL, LOG_FILE

CONSOLE_FORMAT = '%(levelname)s | %(name)s | %(message)s'
FILE_FORMAT = '%(asctime)s | %(levelname)s | %(name)s | %(funcName)s:%(lineno)d | %(message)s'

# One handler per destination, shared by every named logger
_handlers: Dict[str, logging.Handler] = {}


class ColoredFormatter(logging.Formatter):
    """Level name wrapped in ANSI colors; the record itself is left untouched"""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def format(self, record):
        color = self.COLORS.get(record.levelname)
        if not color:
            return super().format(record)
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(colored)


def _shared_handlers():
    if not _handlers:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(logging.INFO)
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT))
        _handlers['console'] = console

        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
        log_file = logging.FileHandler(LOG_FILE)
        log_file.setLevel(logging.DEBUG)
        log_file.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        _handlers['file'] = log_file

    return list(_handlers.values())


def setup_logger(name: str = "tubely") -> logging.Logger:
    """
    Get a named logger wired to the console and the log file

    Safe to call repeatedly with the same name; handlers are attached once.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, LOG_LEVEL, logging.INFO))
    logger.propagate = False

    for handler in _shared_handlers():
        if handler not in logger.handlers:
            logger.addHandler(handler)

    return logger


class PipelineLogger:
    """Logger wrapper that tags every line with the upload's video ID"""

    def __init__(self, stage_name: str, video_id: str = None):
        self.stage_name = stage_name
        self.video_id = video_id
        self.logger = setup_logger("ingestion")
        self.start_time = None

    def _prefix(self) -> str:
        tag = f"{self.video_id}:{self.stage_name}" if self.video_id else self.stage_name
        return f"[{tag}] "

    def start(self, message: str = "Starting stage"):
        """Log stage start"""
        self.start_time = datetime.now()
        self.logger.info(f"{self._prefix()}{message}")

    def info(self, message: str):
        self.logger.info(f"{self._prefix()}{message}")

    def warning(self, message: str):
        self.logger.warning(f"{self._prefix()}{message}")

    def error(self, message: str, exc_info: bool = False):
        self.logger.error(f"{self._prefix()}{message}", exc_info=exc_info)

    def success(self, message: str):
        """Log success message with elapsed time since start()"""
        if self.start_time:
            duration = (datetime.now() - self.start_time).total_seconds()
            message = f"{message} (completed in {duration:.2f}s)"
        self.logger.info(f"{self._prefix()}✓ {message}")

    def debug(self, message: str):
        self.logger.debug(f"{self._prefix()}{message}")
