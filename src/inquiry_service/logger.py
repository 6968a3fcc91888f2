"""Logging utilities for the inquiry service.

This module provides a centralized logging helper. The actual logging setup
(level, handlers, format) is configured once via ``configure_logging()`` at the
entry point to avoid duplicate handlers.

Example:
    Typical usage in a module::

        from inquiry_service.logger import get_logger

        logger = get_logger("InquiryStore")
        logger.info("Inquiry stored")
"""

import logging

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_logger(name: str = "InquiryService") -> logging.Logger:
    """Retrieve a logger instance.

    This function returns a standard library logger with the specified name.
    It does not configure handlers or formatters; that responsibility lies
    with the application entry point.

    Args:
        name: The logger name. Defaults to "InquiryService".

    Returns:
        A ``logging.Logger`` instance bound to the given name.
    """
    return logging.getLogger(name)


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger for a service or CLI process.

    Unknown level names fall back to INFO.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        force=True,
    )
