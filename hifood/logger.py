import logging
import os

from rich.logging import RichHandler


def get_logger(name=None) -> logging.Logger:
    """
    Creates and returns a logger configured with RichHandler for console output.
    """
    if name is None:
        name = "hifood"
    logger = logging.getLogger(name)
    log_level = logging.DEBUG if os.getenv("DEBUG") else logging.INFO
    logger.setLevel(log_level)

    if not logger.handlers:
        console_handler = RichHandler(
            show_time=True,
            show_level=True,
            show_path=False,
            rich_tracebacks=True,
            log_time_format="[%X]",
        )
        console_handler.setFormatter(logging.Formatter("[%(name)s]  %(message)s"))
        console_handler.setLevel(log_level)
        logger.addHandler(console_handler)
        logger.propagate = False

    return logger
