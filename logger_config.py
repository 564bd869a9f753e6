"""
Logging Configuration for live polling sessions
Console output plus rotating log files
"""

import logging
import logging.handlers
import os
from datetime import datetime
import config


def setup_logging(level: int = logging.INFO):
    """
    Route the poller's logs to the console and two rotating files

    Args:
        level: console level; file handlers keep DEBUG and ERROR respectively

    Returns:
        The configured root logger
    """
    for log_file in (config.LOG_FILE, config.ERROR_LOG_FILE):
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)

    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if level <= logging.DEBUG else logging.INFO)

    # Clear any existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # Max 10MB per file, keep 5 backup files
    file_handler = logging.handlers.RotatingFileHandler(
        config.LOG_FILE,
        maxBytes=10*1024*1024,
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    error_handler = logging.handlers.RotatingFileHandler(
        config.ERROR_LOG_FILE,
        maxBytes=5*1024*1024,
        backupCount=3,
        encoding='utf-8'
    )
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(formatter)
    logger.addHandler(error_handler)

    # urllib3 logs every pooled connection at DEBUG
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    logger.info(
        f"Logging initialized at {datetime.now().isoformat()} "
        f"(console {logging.getLevelName(level)}, file {config.LOG_FILE}, errors {config.ERROR_LOG_FILE})"
    )

    return logger
