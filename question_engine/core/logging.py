"""
Logging setup for entry points.

Library modules only import ``loguru.logger``; sinks are configured once by
whoever owns the process (the CLI, a web worker, a test harness).
"""
from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger


def configure_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """
    Replace loguru's default sink with a stderr sink (and optional file sink).

    Args:
        level: Minimum level for the stderr sink
        log_file: Optional path for a rotating DEBUG-level file sink
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            enqueue=True,
        )
