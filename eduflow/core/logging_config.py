# eduflow/core/logging_config.py
"""
Logging configuration for the EduFlow backend.
Console output plus rotating log files; authentication events get their own file.
"""
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

DEFAULT_LOGS_DIR = Path(__file__).parent.parent.parent / "logs"

AUTH_LOGGER_NAME = "eduflow.auth"


class ColoredFormatter(logging.Formatter):
    """Colored console formatter for better readability"""

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record):
        # Format a copy so file handlers never see the escape codes
        record = logging.makeLogRecord(record.__dict__)
        log_color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        record.levelname = f"{log_color}{record.levelname}{self.COLORS['RESET']}"
        return super().format(record)


def _rotating_handler(path: Path, level: int, fmt: str, max_mb: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=max_mb * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt='%Y-%m-%d %H:%M:%S'))
    return handler


def setup_logging(app_name: str = "eduflow", level: str = "INFO", log_dir: Optional[Path] = None):
    """
    Setup logging with console and file handlers.

    Creates three log files:
    - error.log: Only ERROR and CRITICAL messages
    - debug.log: All DEBUG and above messages
    - auth.log: Login, lockout and session events from the eduflow.auth logger
    """
    logs_dir = Path(log_dir) if log_dir else DEFAULT_LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # ═══════════════════════════════════════════════════════════
    # Console Handler - with colors
    # ═══════════════════════════════════════════════════════════
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    console_handler.setFormatter(ColoredFormatter('%(levelname)s | %(name)s | %(message)s'))
    root_logger.addHandler(console_handler)

    # ═══════════════════════════════════════════════════════════
    # ERROR / DEBUG Log Files - Rotating
    # ═══════════════════════════════════════════════════════════
    root_logger.addHandler(_rotating_handler(
        logs_dir / "error.log",
        logging.ERROR,
        '%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s',
        10,
    ))
    root_logger.addHandler(_rotating_handler(
        logs_dir / "debug.log",
        logging.DEBUG,
        '%(asctime)s | %(levelname)-8s | %(name)-30s | %(filename)s:%(lineno)d | %(message)s',
        20,
    ))

    # ═══════════════════════════════════════════════════════════
    # Auth Log File - only the eduflow.auth logger
    # ═══════════════════════════════════════════════════════════
    auth_logger = logging.getLogger(AUTH_LOGGER_NAME)
    for handler in auth_logger.handlers[:]:
        auth_logger.removeHandler(handler)
    auth_logger.addHandler(_rotating_handler(
        logs_dir / "auth.log",
        logging.DEBUG,
        '%(asctime)s | %(levelname)-8s | %(message)s',
        20,
    ))
    auth_logger.setLevel(logging.DEBUG)
    auth_logger.propagate = True  # Also send to root handlers

    # Quiet noisy libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.info(f"{'='*60}")
    logger.info(f"Logging initialized for {app_name}")
    logger.info(f"Log directory: {logs_dir}")
    logger.info(f"{'='*60}")

    return root_logger


def get_auth_logger() -> logging.Logger:
    """Get logger for login, lockout and session events"""
    return logging.getLogger(AUTH_LOGGER_NAME)


def mask_secret(value: Optional[str], visible: int = 6) -> str:
    """Show only the first few characters of a token for debug logs"""
    if not value:
        return "<empty>"
    if len(value) <= visible:
        return "***"
    return f"{value[:visible]}***"
