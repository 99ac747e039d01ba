from __future__ import annotations

import threading
from dataclasses import dataclass

from sqlalchemy.engine import Engine

from tableimport.config.models import ImportJobConfig, RuntimeConfig
from tableimport.etl.extract.readers import FileRowSource
from tableimport.utils.logging import get_logger
from tableimport.worker.import_worker import ImportWorker
from tableimport.worker.models import ImportResult
from tableimport.worker.notify import ImportListener

JOIN_POLL_SECONDS = 0.2


@dataclass
class CommandResult:
    job: str
    status: str
    message: str
    result: ImportResult | None = None


class ImportService:
    def __init__(
        self,
        engine: Engine,
        config: RuntimeConfig,
        listener: ImportListener | None = None,
    ):
        self.engine = engine
        self.config = config
        self.listener = listener
        self.logger = get_logger()

    def build_worker(
        self,
        job_name: str,
        skip_transaction: bool | None = None,
        ignore_errors: bool | None = None,
    ) -> ImportWorker:
        job_cfg = self.config.job(job_name)
        overrides: dict[str, object] = {
            "input_file": str(self.config.data_dir_path / job_cfg.file),
        }
        if skip_transaction is not None:
            overrides["skip_transaction"] = skip_transaction
        if ignore_errors is not None:
            overrides["ignore_errors"] = ignore_errors
        run_cfg: ImportJobConfig = job_cfg.model_copy(update=overrides)

        source = FileRowSource(sheet=run_cfg.sheet, types=run_cfg.types)
        return ImportWorker(
            source=source,
            config=run_cfg,
            engine=self.engine,
            table=run_cfg.table or job_name,
            listener=self.listener,
        )

    def _run_in_background(self, worker: ImportWorker) -> ImportResult:
        outcome: list[ImportResult] = []
        thread = threading.Thread(
            target=lambda: outcome.append(worker.run()),
            name=f"import-{worker.table}",
            daemon=True,
        )
        thread.start()
        try:
            while thread.is_alive():
                thread.join(JOIN_POLL_SECONDS)
        except KeyboardInterrupt:
            self.logger.warning("interrupt requested, stopping import into {}", worker.table)
            worker.interrupt()
            thread.join()
        return outcome[0]

    def run_job(
        self,
        job_name: str,
        skip_transaction: bool | None = None,
        ignore_errors: bool | None = None,
    ) -> CommandResult:
        worker = self.build_worker(job_name, skip_transaction, ignore_errors)
        result = self._run_in_background(worker)
        if result.ok:
            message = (
                f"imported {result.rows_inserted} rows into {result.table}"
                f" (skipped {result.rows_skipped})"
            )
        else:
            message = result.error or "import failed"
        return CommandResult(
            job=job_name,
            status=result.outcome.value,
            message=message,
            result=result,
        )

    def run_all(self) -> list[CommandResult]:
        results: list[CommandResult] = []
        for job_name in self.config.imports:
            command_result = self.run_job(job_name)
            results.append(command_result)
            if command_result.status != "success" and self.config.app.stop_on_error:
                self.logger.error("stopping after failed job {}", job_name)
                break
        return results
