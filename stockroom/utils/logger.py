"""
Logging infrastructure for Stockroom.

Provides application logging with file rotation. The operator-facing action
history is kept separately by the ActionLog service.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from ..config.config_manager import get_config_manager

ROOT_LOGGER_NAME = "stockroom"


class StockroomLogger:
    """
    Application logger for Stockroom.

    Configures the ``stockroom`` logger with both file and console output;
    component loggers are its children and propagate to it.
    """

    def __init__(
        self,
        name: str = ROOT_LOGGER_NAME,
        log_dir: Optional[str] = None,
        log_file: str = "stockroom.log"
    ) -> None:
        """
        Initialize logger.

        Args:
            name: Logger name
            log_dir: Directory for log files (defaults to ``logging.log_dir``)
            log_file: Log file name
        """
        config = get_config_manager()
        self.name = name
        self.log_dir = Path(log_dir or config.get("logging.log_dir", "logs"))
        self.log_file = self.log_dir / log_file

        # Create log directory
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.log_level = str(config.get("logging.level", "INFO")).upper()
        self.console_level = str(config.get("logging.console_level", "WARNING")).upper()
        self.max_file_size_mb = config.get("logging.max_file_size_mb", 5)
        self.backup_count = config.get("logging.backup_count", 3)

        # Create logger
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, self.log_level, logging.INFO))

        # Remove existing handlers
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        # Create formatters
        self.file_formatter = logging.Formatter(
            fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        self.console_formatter = logging.Formatter(
            fmt='%(levelname)s - %(message)s'
        )

        # Set up handlers
        self._setup_file_handler()
        self._setup_console_handler()

    def _setup_file_handler(self) -> None:
        """Set up rotating file handler."""
        max_bytes = int(self.max_file_size_mb * 1024 * 1024)

        file_handler = RotatingFileHandler(
            self.log_file,
            maxBytes=max_bytes,
            backupCount=self.backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(logging.DEBUG)  # File gets all logs
        file_handler.setFormatter(self.file_formatter)

        self.logger.addHandler(file_handler)

    def _setup_console_handler(self) -> None:
        """Set up console handler. Kept quiet so it does not clutter the menu."""
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, self.console_level, logging.WARNING))
        console_handler.setFormatter(self.console_formatter)

        self.logger.addHandler(console_handler)

    def get_logger(self) -> logging.Logger:
        """
        Get underlying logger instance.

        Returns:
            logging.Logger instance
        """
        return self.logger

    def close(self) -> None:
        """Detach and close all handlers."""
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)


# Global logger instance
_logger: Optional[StockroomLogger] = None


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get application logger.

    Args:
        name: Optional component name; returns the ``stockroom.<name>`` child

    Returns:
        Logger instance
    """
    global _logger
    if _logger is None:
        _logger = StockroomLogger()
    if not name or name == ROOT_LOGGER_NAME:
        return _logger.get_logger()
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def reset_loggers() -> None:
    """Reset global logger instance (mainly for testing)."""
    global _logger
    if _logger is not None:
        _logger.close()
    _logger = None
