import logging
import sys


_HANDLER_NAME = "calendar_core.stderr"


def configure_logging(level: str = "WARNING") -> None:
    """Send calendar_core log records to stderr with timestamps.

    Calling it again only changes the level; the handler is installed once.
    """
    package_logger = logging.getLogger("calendar_core")
    package_logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    if any(h.get_name() == _HANDLER_NAME for h in package_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(
        fmt="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))
    package_logger.addHandler(handler)
