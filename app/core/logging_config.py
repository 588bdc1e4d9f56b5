import logging
import sys

from app.core.config import settings


def configure_logging(level: str | None = None) -> None:
    """Send application logs to stdout at the configured level."""
    level = (level or settings.LOG_LEVEL).upper()
    root = logging.getLogger()
    root.setLevel(level)

    # avoid duplicate handlers under the reloader
    if not any(isinstance(h, logging.StreamHandler) and h.stream is sys.stdout for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            fmt="%(asctime)s %(levelname)s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        ))
        root.addHandler(handler)
