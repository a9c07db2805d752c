"""
Logging setup shared by every roadwatch module.

Usage:
    from roadwatch.utils.log_util import app_logger

    logger = app_logger(__name__)
    report_logger = app_logger("report", log_file="report.log")
"""

import logging
import os
from typing import Optional

LOG_DIR = "logs"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level() -> int:
    level_name = os.environ.get("ROADWATCH_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)


def app_logger(name: str, log_file: Optional[str] = None) -> logging.Logger:
    """
    Get a configured logger for the given module name.

    Handlers are attached once per logger name, so calling this repeatedly
    (e.g. on every Streamlit rerun) does not duplicate output.

    :param name: Logger name, usually __name__
    :param log_file: Optional file name under logs/ to also write to
    :return: Configured logging.Logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(_resolve_level())

    if logger.handlers:
        return logger

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        os.makedirs(LOG_DIR, exist_ok=True)
        file_handler = logging.FileHandler(os.path.join(LOG_DIR, log_file))
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
