import logging
import sys

from app.core.logging_config import configure_logging


def test_configure_logging_writes_to_stdout_once(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(root, "handlers", [])
    try:
        configure_logging("debug")
        configure_logging("debug")

        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stdout
        assert root.level == logging.DEBUG
    finally:
        root.setLevel(level)
