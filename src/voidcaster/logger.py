"""  Logger configuration """

# System
from typing import Optional
import logging
import sys


CONSOLE_FORMAT = "%(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] (%(filename)s:%(lineno)d) %(message)s"


def init_logging(log_file: Optional[str], debug: bool = False):
    """Creates the basic configuration"""
    handlers = []

    if log_file:
        # Use UTF-8 encoding for file handlers to support Unicode characters
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        handlers.append(file_handler)
    else:
        # Diagnostics belong on stderr; stdout is reserved for the interactive prompt
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers.append(stream_handler)

    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
        force=True
    )


def setup_logger(name: str):
    """ Configures a new logger"""
    return logging.getLogger(name)
