from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Any, Sequence

from sqlalchemy import text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.elements import TextClause

from tableimport.etl.extract.source import RowSource
from tableimport.etl.load.quoting import IdentifierQuoter
from tableimport.etl.load.schema import TargetColumns
from tableimport.utils.logging import get_logger
from tableimport.worker.cancellation import CancellationSignal
from tableimport.worker.errors import ImportInterrupted, RowError, store_error_text
from tableimport.worker.notify import ImportListener

INSERT_TEMPLATE = "INSERT INTO {table} ({columns}) VALUES ({values})"
INTERRUPT_CHECK_INTERVAL = 100
PROGRESS_INTERVAL = 1000
MISSING_VALUE = ""


@dataclass
class LoadCounters:
    rows_read: int = 0
    rows_inserted: int = 0
    rows_skipped: int = 0


def _literal_colons(sql_fragment: str) -> str:
    # text() would read ":name" inside a quoted identifier as a bind parameter
    return sql_fragment.replace(":", "\\:")


def build_insert_statement(
    table_name: str,
    target: TargetColumns,
    quoter: IdentifierQuoter,
) -> TextClause:
    sql = INSERT_TEMPLATE.format(
        table=_literal_colons(quoter.quote_identifier_if_needed(table_name)),
        columns=", ".join(_literal_colons(name) for name in target.quoted),
        values=", ".join(f":p{index}" for index in range(len(target))),
    )
    return text(sql)


def fit_row(row: Sequence[Any], width: int) -> list[Any]:
    values = list(row[:width])
    values.extend(MISSING_VALUE for _ in range(width - len(values)))
    return values


class BatchLoader:
    def __init__(
        self,
        conn: Connection,
        table_name: str,
        target: TargetColumns,
        quoter: IdentifierQuoter,
        listener: ImportListener,
        cancellation: CancellationSignal,
        ignore_errors: bool = False,
        autonomous: bool = False,
    ):
        self.conn = conn
        self.table_name = table_name
        self.target = target
        self.listener = listener
        self.cancellation = cancellation
        self.ignore_errors = ignore_errors
        self.autonomous = autonomous
        self.statement = build_insert_statement(table_name, target, quoter)
        self.counters = LoadCounters()
        self.logger = get_logger(table=table_name)

    def _execute(self, params: dict[str, Any]) -> None:
        if self.autonomous:
            try:
                self.conn.execute(self.statement, params)
                self.conn.commit()
            except SQLAlchemyError:
                self.conn.rollback()
                raise
        elif self.ignore_errors:
            with self.conn.begin_nested():
                self.conn.execute(self.statement, params)
        else:
            self.conn.execute(self.statement, params)

    def load(self, source: RowSource) -> LoadCounters:
        width = len(self.target)
        row_number = 0
        checkpoint = perf_counter()

        while True:
            # before rows 99, 199, ...; the start of the run is checked by the worker
            if (row_number + 1) % INTERRUPT_CHECK_INTERVAL == 0 and self.cancellation.is_requested():
                raise ImportInterrupted()

            row = source.next()
            if not row:
                break
            self.counters.rows_read += 1

            values = fit_row(row, width)
            params = {f"p{index}": value for index, value in enumerate(values)}
            try:
                self._execute(params)
            except SQLAlchemyError as exc:
                detail = store_error_text(exc)
                if not self.ignore_errors:
                    raise RowError(f"Error while importing data: {detail}") from exc

                self.logger.debug(
                    "Could not import data row number {}. The row was ignored. Problem details: {}",
                    row_number + 1,
                    detail,
                )
                self.listener.warn(
                    f"Could not import data row number {row_number + 1}. The row was ignored. "
                    f"Problem details: {detail}"
                )
                self.counters.rows_skipped += 1
            else:
                self.counters.rows_inserted += 1

            row_number += 1
            if row_number % PROGRESS_INTERVAL == 0:
                now = perf_counter()
                self.logger.debug(
                    "table={} rows={} last_batch_seconds={:.3f}",
                    self.table_name,
                    row_number,
                    now - checkpoint,
                )
                checkpoint = now

        return self.counters
