import logging
import sys


def setup_logging(level="INFO") -> logging.Logger:
    """Configure the root logger with a single stderr handler.

    stdout carries the CSV records, so log lines stay off it.
    """
    if isinstance(level, str):
        level = getattr(logging, level.upper())

    handler = logging.StreamHandler(sys.stderr)
    fmt = "%(asctime)s %(levelname)s [%(name)s:%(module)s:%(lineno)d] %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%Y-%m-%dT%H:%M:%S%z"))

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)
    return root
