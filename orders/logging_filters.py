"""Logging setup for the orders service.

Records from the ``orders`` logger hierarchy are written as JSON lines.
``RequestIdFilter`` injects the current request id into each record using
the ContextVar set by the request-id middleware, so formatters can always
reference ``%(request_id)s``.
"""

import logging
from logging import Filter, LogRecord

from pythonjsonlogger import jsonlogger

from .middleware import REQUEST_ID_CTX

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s %(request_id)s"


class RequestIdFilter(Filter):
    """Attach a ``request_id`` attribute to log records.

    Outside of a request the ContextVar default, a hyphen, is used.
    """

    def filter(self, record: LogRecord) -> bool:
        record.request_id = REQUEST_ID_CTX.get()
        return True


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach a JSON handler to the ``orders`` logger once.

    Args:
        level: Level name applied to the ``orders`` logger.

    Returns:
        logging.Logger: The configured ``orders`` logger.
    """
    logger = logging.getLogger("orders")
    if not logger.handlers:
        h = logging.StreamHandler()
        h.setFormatter(jsonlogger.JsonFormatter(LOG_FORMAT))
        h.addFilter(RequestIdFilter())
        logger.addHandler(h)
    logger.setLevel(level)
    return logger
