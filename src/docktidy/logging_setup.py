"""Logging configuration for docktidy."""

import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("docktidy")


def setup_logging(verbose: bool = False, log_file: str | None = None) -> None:
    """Configure the docktidy logger.

    Args:
        verbose: Enable debug output on the console
        log_file: Optional path to append full debug logs to
    """
    level = logging.DEBUG if verbose else logging.WARNING

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        rich_tracebacks=verbose,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to open log file {log_file}: {e}")
        else:
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
            )
            logger.addHandler(file_handler)

    logger.setLevel(logging.DEBUG if (verbose or log_file) else logging.WARNING)
    logger.propagate = False
    logger.debug("Verbose logging enabled")
