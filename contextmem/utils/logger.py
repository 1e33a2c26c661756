"""Logging configuration using Loguru."""

import sys
from pathlib import Path

from loguru import logger

from contextmem.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[module]}:{function}:{line} - {message}"

# Third-party modules that log every HTTP round trip at INFO
QUIET_MODULES = {"httpx": "WARNING", "httpcore": "WARNING", "qdrant_client": "WARNING"}


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_dir: str = "logs",
    file_rotation: str = "10 MB",
    file_retention: str = "7 days",
    compression: str = "zip",
    serialize: bool = True,
) -> None:
    """
    Configure Loguru sinks.

    The console sink is always installed. With ``log_to_file`` a second,
    rotated sink writes ``contextmem_<date>.log`` (JSON lines when
    ``serialize`` is set) through a background queue so request handlers
    never block on disk.
    """
    logger.remove()
    logger.configure(extra={"module": "contextmem"})

    console_filter = {"": level, **QUIET_MODULES}
    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        filter=console_filter,
        colorize=True,
    )

    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "contextmem_{time:YYYY-MM-DD}.log",
            level=level,
            format=FILE_FORMAT,
            rotation=file_rotation,
            retention=file_retention,
            compression=compression,
            serialize=serialize,
            enqueue=True,
        )


def setup_logging_from_config(config: LoggingConfig) -> None:
    """Configure sinks from the ``logging`` config section."""
    setup_logging(**config.model_dump())


def get_logger(name: str):
    """Logger bound to a module name (shown in the ``module`` column)."""
    return logger.bind(module=name)
