import logging
import os

_FILE_HANDLER_NAME = "cfp-file"
_LOG_FORMAT = "%(asctime)s %(levelname)s [%(filename)s:%(funcName)s#L%(lineno)d]: %(message)s"
_DATE_FORMAT = "%b %d %H:%M:%S"


class _ExtraFilter(logging.Filter):
    """
    Handles the "extra" parameter that can be passed to logging invocations. Formats any log to
    be printed as: "{function} | {label} | {message}"
    """

    def __init__(self):
        super().__init__()
        self.message_format = "{function} | {label} | {message}"

    def filter(self, record: logging.LogRecord) -> bool:
        """
        This is called once per record before any handler sees it. We check which variables are
        given by the caller and fill them with defaults if not provided.
        Specifically, this handles the following parameters:
            - "function" (default: record.funcName, which is the function where logger is invoked)
            - "label" (default: None)

        Args:
            record: provided by logging library, contains info for a specific logging invocation

        Returns:
            Always True; records are rewritten, never dropped.
        """
        func = record.__dict__.get("function", record.funcName)
        label = record.__dict__.get("label")
        record.msg = self.message_format.format(function=func, label=label, message=record.msg)
        return True


def _create_cfp_logger():
    """
    Create and configure a logger for the application's purposes.
    """
    logging.basicConfig(format=_LOG_FORMAT, datefmt=_DATE_FORMAT)
    logger = logging.getLogger(__name__)
    logger.setLevel(logging.DEBUG)

    logger.addFilter(_ExtraFilter())
    return logger


def parse_level(name, default=logging.DEBUG) -> int:
    """Translate a level name such as "debug" or "WARNING" into its numeric value.

    Unknown names fall back to `default`.
    """
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def configure_file_logging(path: str, level: int = logging.DEBUG) -> logging.Handler:
    """Send cfp_logger records at or above `level` to the file at `path`.

    Any file handler installed by a previous call is closed and replaced, so calling this once per
    application instance never duplicates output.

    Args:
        path: The log file. Its parent directory is created if needed.
        level: The minimum level written to the file.

    Returns:
        The newly attached handler.
    """
    for handler in list(cfp_logger.handlers):
        if handler.get_name() == _FILE_HANDLER_NAME:
            cfp_logger.removeHandler(handler)
            handler.close()

    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)

    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.set_name(_FILE_HANDLER_NAME)
    file_handler.setLevel(level)
    file_handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt=_DATE_FORMAT))
    cfp_logger.addHandler(file_handler)

    return file_handler


# pylint: disable=pointless-string-statement
"""
Usage:
from cfp.utils.logs import cfp_logger

cfp_logger.<loglevel>(msg)

cfp_logger can handle an extra argument that is a dictionary
containing the following supported keys:
- label

Examples:
cfp_logger.info("hi")
cfp_logger.error("oh no")
cfp_logger.error("oh no", extra={"label": "you done goofed"})
"""
cfp_logger = _create_cfp_logger()
