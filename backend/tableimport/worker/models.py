from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ImportOutcome(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    INTERRUPTED = "interrupted"


@dataclass
class ImportResult:
    table: str
    outcome: ImportOutcome = ImportOutcome.FAILURE
    rows_read: int = 0
    rows_inserted: int = 0
    rows_skipped: int = 0
    table_created: bool = False
    error: str | None = None
    elapsed_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is ImportOutcome.SUCCESS
