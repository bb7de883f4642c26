"""
Logging utilities for the migration runner.

Configuration comes from the ``[logging]`` config section:

    [logging]
    level = "INFO"            # root level
    console = true            # log to stderr
    file = "logs/migrate.log" # optional log file
    rotate = true             # rotate the file at midnight, keep a week

    [logging.logger."lib.migrate"]
    level = "DEBUG"
"""

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def getLogLevelByStr(levelStr: str, default: Optional[int] = None) -> Optional[int]:
    """Get log level by string."""
    level = logging.getLevelName(str(levelStr).upper())
    if isinstance(level, int):
        return level
    logger.error(f"Invalid log level '{levelStr}'")
    return default


def _makeFileHandler(logFile: str, rotate: bool) -> logging.Handler:
    Path(logFile).parent.mkdir(parents=True, exist_ok=True)
    if rotate:
        return TimedRotatingFileHandler(
            filename=logFile,
            when="midnight",
            interval=1,
            backupCount=7,
            encoding="utf-8",
        )
    return logging.FileHandler(logFile, encoding="utf-8")


def configureLogger(localLogger: logging.Logger, config: Dict[str, Any]) -> None:
    """Apply level, propagation and handlers from config to a single logger."""
    if "propagate" in config:
        localLogger.propagate = bool(config["propagate"])

    if "level" in config:
        level = getLogLevelByStr(config["level"])
        if level is not None:
            localLogger.setLevel(level)

    if "console" not in config and "file" not in config:
        return

    for handler in localLogger.handlers[:]:
        localLogger.removeHandler(handler)

    formatter = logging.Formatter(config.get("format", DEFAULT_FORMAT))
    handlers: list[logging.Handler] = []

    if config.get("console", False):
        handlers.append(logging.StreamHandler())

    if "file" in config:
        try:
            handlers.append(_makeFileHandler(config["file"], bool(config.get("rotate", False))))
        except OSError as e:
            logger.error(f"Failed to setup file logging for {localLogger.name}: {e}")

    for handler in handlers:
        handler.setFormatter(formatter)
        localLogger.addHandler(handler)


def initLogging(config: Dict[str, Any], verbose: bool = False) -> None:
    """
    Configure logging from config file settings.

    Args:
        config: Content of the ``[logging]`` section
        verbose: Force DEBUG on the root logger (``--verbose`` CLI flag)
    """
    rootLogger = logging.getLogger()
    rootLogger.setLevel(logging.WARNING)

    configureLogger(rootLogger, {"console": True, **config})
    if verbose:
        rootLogger.setLevel(logging.DEBUG)

    for loggerName, loggerConfig in config.get("logger", {}).items():
        logger.debug(f"Configuring logger '{loggerName}' with config {loggerConfig}")
        configureLogger(logging.getLogger(loggerName), loggerConfig)

    logger.debug(f"Logging configured: root level={logging.getLevelName(rootLogger.getEffectiveLevel())}")
