"""
Centralized logging configuration for the raffle
Console output for operators, optional rotating file for long-running keepers
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

# Chatty library loggers, held at WARNING unless we run at DEBUG
QUIET_LOGGERS = ('sqlalchemy.engine', 'discord', 'redis')

CONSOLE_FORMAT = '[%(asctime)s] %(levelname)-8s %(message)s'
FILE_FORMAT = '[%(asctime)s] %(levelname)-8s [%(name)s.%(funcName)s:%(lineno)d] %(message)s'


def setup_logging(app_name='keeper_raffle', log_level=None, log_file=None):
    """
    Configure the package logger

    Args:
        app_name: Logger to configure; every raffle module logs under it
        log_level: Level name (default LOG_LEVEL env, then INFO)
        log_file: Path for a rotating log file (default LOG_FILE env)

    Returns:
        logging.Logger
    """
    log_level = log_level or os.getenv('LOG_LEVEL', 'INFO')
    log_file = log_file or os.getenv('LOG_FILE')
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    logger = logging.getLogger(app_name)
    logger.setLevel(numeric_level)
    # setup may run more than once per process (tests, repeated CLI calls)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    logger.addHandler(console_handler)

    if log_file:
        _add_file_handler(logger, log_file, numeric_level)

    library_level = logging.DEBUG if numeric_level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    logger.propagate = False
    return logger


def _add_file_handler(logger, log_file, level):
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    # 10MB per file, keep 5 backups
    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=10 * 1024 * 1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
    logger.addHandler(file_handler)

    logger.info(f"📝 File logging enabled: {log_file}")
