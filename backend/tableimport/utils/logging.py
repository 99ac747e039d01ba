from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | table={extra[table]} | "
    "{name}:{function}:{line} - {message}"
)
NO_TABLE = "-"


def configure_logging(level: str = "INFO", logs_dir: Path | None = None) -> None:
    destination = logs_dir or Path("logs")
    destination.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"table": NO_TABLE})
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT, enqueue=True)
    logger.add(
        destination / "import.log",
        level=level.upper(),
        format=LOG_FORMAT,
        enqueue=True,
        rotation="20 MB",
        retention="30 days",
        encoding="utf-8",
    )


def get_logger(table: str | None = None):
    if table is None:
        return logger
    return logger.bind(table=table)
