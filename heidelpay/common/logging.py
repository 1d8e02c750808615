"""Structured JSON logging with gateway-call context fields."""

import logging
import sys
from contextvars import ContextVar

from pythonjsonlogger.json import JsonFormatter

from heidelpay.common.config import settings


operation_ctx: ContextVar[str] = ContextVar("operation", default="")
payment_id_ctx: ContextVar[str] = ContextVar("payment_id", default="")


class ContextFilter(logging.Filter):
    """Inject service name and call identifiers into every log record."""

    def __init__(self, service_name: str | None = None) -> None:
        super().__init__()
        self.service_name = service_name or settings.service_name

    def filter(self, record: logging.LogRecord) -> bool:
        record.service_name = self.service_name
        record.operation = operation_ctx.get()
        record.payment_id = payment_id_ctx.get()
        return True


def configure_logging(level: str | None = None, stream=None) -> logging.Handler:
    """Attach a JSON handler to the `heidelpay` logger.

    Never called on import; applications opt in. Returns the handler so it can
    be removed again.
    """

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(ContextFilter())
    formatter = JsonFormatter(
        "%(asctime)s %(levelname)s %(service_name)s %(operation)s %(payment_id)s %(message)s"
    )
    handler.setFormatter(formatter)

    logger.handlers = [handler]
    logger.setLevel(level or settings.log_level)
    logger.propagate = False
    return handler


logger = logging.getLogger("heidelpay")
