from __future__ import annotations

from time import perf_counter

from sqlalchemy.engine import Connection, Engine, RootTransaction
from sqlalchemy.exc import SQLAlchemyError

from tableimport.config.models import ImportConfig
from tableimport.etl.extract.source import RowSource
from tableimport.etl.load.batch_loader import BatchLoader
from tableimport.etl.load.quoting import DialectQuoter, IdentifierQuoter
from tableimport.etl.load.schema import resolve_target_columns
from tableimport.utils.logging import get_logger
from tableimport.worker.cancellation import CancellationSignal
from tableimport.worker.errors import (
    ImportFailure,
    ImportInterrupted,
    ImportRejected,
    SchemaError,
    TransactionError,
    store_error_text,
)
from tableimport.worker.models import ImportOutcome, ImportResult
from tableimport.worker.notify import ImportListener, LoggingListener


class ImportWorker:
    def __init__(
        self,
        source: RowSource,
        config: ImportConfig,
        engine: Engine,
        table: str,
        listener: ImportListener | None = None,
        quoter: IdentifierQuoter | None = None,
    ):
        self.source = source
        self.config = config
        self.engine = engine
        self.table = table
        self.listener = listener or LoggingListener()
        self.quoter = quoter
        self.cancellation = CancellationSignal()
        self.logger = get_logger(table=table)

    def interrupt(self) -> None:
        self.cancellation.request()

    def is_interrupted(self) -> bool:
        return self.cancellation.is_requested()

    def run(self) -> ImportResult:
        result = ImportResult(table=self.table)
        started = perf_counter()
        try:
            self._run(result)
            result.outcome = ImportOutcome.SUCCESS
        except ImportRejected as exc:
            result.error = str(exc)
            self.logger.info("import into {} rejected by the data source", self.table)
        except ImportInterrupted as exc:
            result.outcome = ImportOutcome.INTERRUPTED
            result.error = str(exc)
            self._notify("error", result.error)
        except ImportFailure as exc:
            result.error = str(exc)
            self._notify("error", result.error)
        except Exception as exc:
            self.logger.exception("import into {} failed", self.table)
            result.error = f"Error while importing data: {exc}"
            self._notify("error", result.error)
        finally:
            result.elapsed_seconds = perf_counter() - started
            self._finish(result)
        return result

    def _run(self, result: ImportResult) -> None:
        if not self.source.before_import(self.config):
            raise ImportRejected("Import rejected by the data source.")

        columns = list(self.source.get_columns())
        if not columns:
            raise SchemaError("No columns provided by the import plugin.")

        autonomous = self.config.skip_transaction
        with self.engine.connect() as conn:
            quoter = self.quoter or DialectQuoter(conn.dialect)
            transaction = None if autonomous else self._begin(conn)
            try:
                target = resolve_target_columns(
                    conn,
                    self.table,
                    columns,
                    quoter,
                    self.listener,
                    autonomous=autonomous,
                )
                result.table_created = target.created

                if self.is_interrupted():
                    raise ImportInterrupted()

                loader = BatchLoader(
                    conn,
                    self.table,
                    target,
                    quoter,
                    self.listener,
                    self.cancellation,
                    ignore_errors=self.config.ignore_errors,
                    autonomous=autonomous,
                )
                try:
                    loader.load(self.source)
                finally:
                    result.rows_read = loader.counters.rows_read
                    result.rows_inserted = loader.counters.rows_inserted
                    result.rows_skipped = loader.counters.rows_skipped

                if transaction is not None:
                    self._commit(transaction)
            except Exception:
                if transaction is not None:
                    self._rollback(transaction)
                raise

    def _begin(self, conn: Connection) -> RootTransaction:
        try:
            return conn.begin()
        except SQLAlchemyError as exc:
            raise TransactionError(
                "Could not start transaction in order to import a data: "
                f"{store_error_text(exc)}"
            ) from exc

    def _commit(self, transaction: RootTransaction) -> None:
        try:
            transaction.commit()
        except SQLAlchemyError as exc:
            raise TransactionError(
                f"Could not commit transaction for imported data: {store_error_text(exc)}"
            ) from exc

    def _rollback(self, transaction: RootTransaction) -> None:
        try:
            transaction.rollback()
        except SQLAlchemyError:
            self.logger.exception("rollback of import into {} failed", self.table)

    def _finish(self, result: ImportResult) -> None:
        if result.ok and result.table_created:
            self._notify("table_created", self.table)

        try:
            self.source.after_import()
        except Exception:
            self.logger.exception("after_import hook of the data source failed")

        self.logger.info(
            "table={} outcome={} rows_read={} rows_inserted={} rows_skipped={} elapsed_seconds={:.3f}",
            self.table,
            result.outcome.value,
            result.rows_read,
            result.rows_inserted,
            result.rows_skipped,
            result.elapsed_seconds,
        )
        self._notify("finished", result.ok)

    def _notify(self, event: str, *args: object) -> None:
        try:
            getattr(self.listener, event)(*args)
        except Exception:
            self.logger.exception("listener failed to handle {}", event)
