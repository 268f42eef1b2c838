"""
Logging setup for the driver scripts and interactive sessions.
The library modules only create loggers; nothing here runs on import.
"""
import logging
import sys
from typing import Optional, Union

PACKAGE_LOGGER = "matching2d"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    quiet_matplotlib: bool = True,
) -> logging.Logger:
    """
    Route the 'matching2d' loggers to stdout, and optionally to a file.

    Args:
        level: Level number or name ("DEBUG", "INFO", ...). DEBUG prints one
            line per resolved event.
        log_file: Optional path; the file is overwritten on each call.
        quiet_matplotlib: Hold matplotlib's own loggers at WARNING so DEBUG
            runs of the animation are not flooded with font and backend chatter.

    Returns:
        The configured package logger.
    """
    if isinstance(level, str):
        name = level.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {level!r}")
        level = logging.getLevelName(name)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    # Repeated calls replace the handlers; close them so log files are released.
    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))
    for h in handlers:
        h.setLevel(level)
        h.setFormatter(formatter)
        logger.addHandler(h)

    if quiet_matplotlib:
        logging.getLogger("matplotlib").setLevel(logging.WARNING)

    logger.debug("Logging initialized at %s.", logging.getLevelName(level))
    return logger
