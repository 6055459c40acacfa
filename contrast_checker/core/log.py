"""Structured logging configuration.

Library modules only call structlog.get_logger(). Until an application
configures logging, they are routed through stdlib loggers under the
contrast_checker namespace, which carries a NullHandler, so library use
writes nothing. The CLI calls configure_logging() once. Logs go to stderr so
that reports on stdout stay machine-readable.
"""

import logging
import sys

import structlog

LOGGER_NAME = 'contrast_checker'


def configure_library_defaults() -> None:
    """Route structlog through stdlib logging unless the application already configured it."""
    package_logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h, logging.NullHandler) for h in package_logger.handlers):
        package_logger.addHandler(logging.NullHandler())
    if structlog.is_configured():
        return
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.processors.KeyValueRenderer(key_order=['event']),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def configure_logging(level: str = 'WARNING', json_format: bool = False) -> None:
    """Configure structlog on top of the stdlib logging backend.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: Output logs as JSON
    """
    numeric = getattr(logging, level.upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f'Unknown log level: {level!r}')

    logging.basicConfig(format='%(message)s', stream=sys.stderr, level=numeric, force=True)

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt='iso'),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]
    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
