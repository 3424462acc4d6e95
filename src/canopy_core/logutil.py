import logging
import re
import time
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional


_SECRET_FIELDS = re.compile(r"(sk_b64|secret|private_key|signing_key)=\S+", re.IGNORECASE)


class RedactingFilter(logging.Filter):
    """Mask signing key material that ends up in log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        msg = str(record.getMessage())
        redacted = _SECRET_FIELDS.sub(r"\1=***", msg)
        if redacted != msg:
            record.msg = redacted
            record.args = None
        return True


def setup_logging(level=logging.INFO, loggers: Iterable[str] = ("canopy",)) -> None:
    logging.basicConfig(
        level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    f = RedactingFilter()
    for name in loggers:
        lg = logging.getLogger(name)
        lg.setLevel(level)
        lg.addFilter(f)


@contextmanager
def timed(name: str, logger: Optional[logging.Logger] = None, enabled: bool = True) -> Iterator[None]:
    """Log how long the wrapped block took."""
    log = logger or logging.getLogger("canopy.timing")
    start = time.perf_counter()
    try:
        yield
    finally:
        if enabled:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            log.info("%s took %.3fms", name, elapsed_ms)
