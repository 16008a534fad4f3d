import sys
import time
from contextlib import contextmanager

from loguru import logger as logging

from picwall.config import ENVIRONMENT, LOG_LEVEL
from picwall.utils.errors import ErrorSource

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[request_id]}</cyan> | {name}:{function}:{line} - <level>{message}</level>"
)


def configure_logging(level: str = LOG_LEVEL):
    """Replace loguru's default sink with one that shows the request id."""
    logging.remove()
    logging.configure(extra={"request_id": "-"})
    logging.add(
        sys.stderr,
        level=level.upper(),
        format=LOG_FORMAT,
        colorize=ENVIRONMENT != "production",
        backtrace=ENVIRONMENT != "production",
        diagnose=False,
    )


@contextmanager
def track_performance(operation: str, source: ErrorSource = ErrorSource.API):
    """Log how long the wrapped block took; failures are logged and re-raised."""
    start = time.perf_counter()
    try:
        yield
    except Exception:
        duration_ms = int((time.perf_counter() - start) * 1000)
        logging.error("[ERROR][{}] Operation '{}' failed after {}ms", source.value, operation, duration_ms)
        raise
    duration_ms = int((time.perf_counter() - start) * 1000)
    logging.info("[INFO][{}] Operation '{}' completed in {}ms", source.value, operation, duration_ms)
