from __future__ import annotations

from typing import Protocol

from tableimport.utils.logging import get_logger


class ImportListener(Protocol):
    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def table_created(self, table: str) -> None: ...

    def finished(self, success: bool) -> None: ...


class LoggingListener:
    def __init__(self) -> None:
        self.logger = get_logger()

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def table_created(self, table: str) -> None:
        self.logger.info("created table {}", table)

    def finished(self, success: bool) -> None:
        self.logger.info("import finished success={}", success)
