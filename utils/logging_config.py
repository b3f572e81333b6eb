# utils/logging_config.py
import logging
import logging.config
import os
import sys
from pathlib import Path
from typing import Optional

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _log_system_info(logger: logging.Logger):
    """Log standardized system information"""
    logger.debug("=" * 60)
    logger.debug("SYSTEM INFO")
    logger.debug(f"Python version: {sys.version.split()[0]}")
    logger.debug(f"Platform: {sys.platform}")
    logger.debug(f"Working directory: {os.getcwd()}")
    logger.debug("=" * 60)


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None):
    """Setup logging for a version sync run.

    Console output always goes to stderr so that command output on stdout
    stays machine readable. A rotating file log is added when ``log_dir``
    is given.
    """
    log_level = log_level.upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(f"Log level must be one of {VALID_LOG_LEVELS}. Got: {log_level}")

    handlers = {
        'console': {
            'class': 'logging.StreamHandler',
            'level': log_level,
            'formatter': 'standard',
            'stream': 'ext://sys.stderr'
        },
    }
    root_handlers = ['console']

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'level': 'DEBUG',
            'formatter': 'detailed',
            'filename': str(Path(log_dir) / 'version_sync.log'),
            'maxBytes': 10485760,
            'backupCount': 5,
            'encoding': 'utf-8'
        }
        root_handlers.append('file')

    LOGGING_CONFIG = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'standard': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            },
            'detailed': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(funcName)s() - %(message)s',
                'datefmt': '%Y-%m-%d %H:%M:%S'
            }
        },
        'handlers': handlers,
        'root': {
            'level': 'DEBUG' if log_dir else log_level,
            'handlers': root_handlers
        }
    }

    logging.config.dictConfig(LOGGING_CONFIG)

    logger = logging.getLogger(__name__)
    logger.debug(f"Logging initialized (level={log_level}, dir={log_dir or '-'})")
    _log_system_info(logger)
