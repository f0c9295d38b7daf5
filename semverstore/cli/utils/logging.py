import logging
import sys


logger = logging.getLogger("semverstore")

DEBUG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(debug: bool):
    """
    Configures the package logger based on the debug flag.

    Log records go to stderr; stdout only carries the versions printed by
    the commands.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(log_level)

    if not logger.hasHandlers():
        handler = logging.StreamHandler(sys.stderr)
        logger.addHandler(handler)

    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and handler.stream is sys.stderr:
            handler.setFormatter(
                logging.Formatter(DEBUG_FORMAT if debug else "%(message)s")
            )
