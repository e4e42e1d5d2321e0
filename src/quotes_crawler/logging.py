import logging
import sys

PACKAGE_LOGGER = "quotes_crawler"


def setup_logger(level=logging.INFO):
    """
    Sets up the package logger with the specified logging level.
    Logs will be output to stdout. Calling it again only changes the level.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger
