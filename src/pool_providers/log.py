"""Logging setup for processes embedding the providers."""

import logging

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: int | str = logging.INFO) -> None:
    """Set up logging with Rich handler to stderr."""
    if isinstance(level, str):
        level = getattr(logging, level.upper())
    rich_handler = RichHandler(
        console=Console(stderr=True),
        log_time_format="[%X]",
        show_path=False,
    )
    rich_handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        handler.close()
        root_logger.removeHandler(handler)
    root_logger.addHandler(rich_handler)

    # Vendor SDK and its HTTP stack are noisy at debug level
    for name in ("ovh", "requests", "urllib3"):
        lg = logging.getLogger(name)
        for h in lg.handlers[:]:
            lg.removeHandler(h)
        lg.setLevel(max(level, logging.WARNING))
        lg.propagate = True
