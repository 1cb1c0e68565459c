"""
Custom logging configuration with optional suppression of received-data lines
"""

import logging
import logging.config
from typing import Dict, Any


class ReceivedDataFilter(logging.Filter):
    """Filter to suppress per-chunk "read:" lines from sessions."""

    def __init__(self, show_received: bool = True):
        super().__init__()
        self.show_received = show_received

    def filter(self, record: logging.LogRecord) -> bool:
        """Drop session read lines unless received data should be shown."""
        if self.show_received:
            return True
        if record.name.startswith("tcpswarm.modules.session"):
            if " read: " in record.getMessage():
                return False
        return True


def get_logging_config(level: str = "INFO", show_received: bool = True) -> Dict[str, Any]:
    """Get logging configuration for the CLI entry points."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "received_data_filter": {
                "()": ReceivedDataFilter,
                "show_received": show_received,
            }
        },
        "formatters": {
            "default": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stdout",
                "filters": ["received_data_filter"]
            }
        },
        "loggers": {
            "tcpswarm": {
                "handlers": ["default"],
                "level": level,
                "propagate": False
            },
            "asyncio": {
                "handlers": ["default"],
                "level": "WARNING",
                "propagate": False
            }
        },
        "root": {
            "level": level,
            "handlers": ["default"]
        }
    }


def configure_logging(level: str = "INFO", show_received: bool = True) -> None:
    """Apply get_logging_config() to the logging module."""
    logging.config.dictConfig(get_logging_config(level, show_received))
