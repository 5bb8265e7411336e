"""
Frontline Logging Configuration

Provides centralized logging setup for consistent log formatting
across the CLI and the web API.

Modules log through logging.getLogger(__name__); the entry point configures
the root logger once at startup:
    from utils.logging_config import setup_logging
    setup_logging(level=logging.DEBUG, log_file="~/.local/state/frontline/diagnostics.log")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
import threading

# Thread-safe initialization
_initialized = False
_lock = threading.Lock()

DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(name)s:%(lineno)d | %(levelname)s | %(message)s"

LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

# Third-party loggers that drown out diagnostics output
NOISY_LOGGERS = ('urllib3', 'werkzeug', 'flask', 'asyncio')


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name on a TTY."""

    def __init__(self, fmt=None, datefmt=None, use_colors=True, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record):
        if not self.use_colors or record.levelname not in LEVEL_COLORS:
            return super().format(record)
        original = record.levelname
        record.levelname = f"{LEVEL_COLORS[original]}{original}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


def parse_level(name: Optional[str], default: int = logging.INFO) -> int:
    """Map a level name ("debug", "WARNING") to its logging constant."""
    if not name:
        return default
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    log_format: str = DEFAULT_FORMAT,
    use_colors: bool = True,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    suppress_libs: bool = True,
    force: bool = False,
) -> None:
    """
    Configure the root logger with consistent settings.

    Console output goes to stderr so --json output on stdout stays clean.

    Args:
        level: Logging level (default INFO)
        log_file: Optional file path for logging
        log_format: Log message format string
        use_colors: Enable colored output in terminal
        max_bytes: Max log file size before rotation
        backup_count: Number of backup files to keep
        suppress_libs: Suppress noisy third-party loggers
        force: Reconfigure even if already initialized
    """
    global _initialized

    with _lock:
        if _initialized and not force:
            return

        root_logger = logging.getLogger()
        root_logger.setLevel(level)
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        if use_colors:
            console_handler.setFormatter(ColoredFormatter(log_format, stream=sys.stderr))
        else:
            console_handler.setFormatter(logging.Formatter(log_format))
        root_logger.addHandler(console_handler)

        if log_file:
            log_path = Path(log_file).expanduser()
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.handlers.RotatingFileHandler(
                    log_path,
                    maxBytes=max_bytes,
                    backupCount=backup_count,
                )
            except OSError as e:
                root_logger.warning(f"File logging disabled, cannot open {log_path}: {e}")
            else:
                file_handler.setLevel(level)
                file_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
                root_logger.addHandler(file_handler)

        if suppress_libs:
            for lib_name in NOISY_LOGGERS:
                logging.getLogger(lib_name).setLevel(logging.WARNING)

        _initialized = True
