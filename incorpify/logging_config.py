"""Logging setup shared by the web app and the terminal chat."""

import logging
import sys

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once; later calls only adjust the level."""
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level}")

    root = logging.getLogger()
    if not any(getattr(h, "_incorpify", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        handler._incorpify = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(numeric)
