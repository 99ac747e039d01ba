from __future__ import annotations

from pathlib import Path
from typing import Mapping

import pandas as pd

from tableimport.config.models import ImportConfig
from tableimport.etl.extract.frame import DataFrameRowSource
from tableimport.utils.logging import get_logger

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}


def read_source_dataframe(
    source_path: Path,
    sheet: str | None = None,
    encoding: str = "utf-8",
) -> pd.DataFrame:
    if not source_path.exists():
        raise FileNotFoundError(f"source file not found: {source_path}")

    suffix = source_path.suffix.lower()
    if suffix in EXCEL_SUFFIXES:
        if not sheet:
            raise ValueError(f"sheet is required for Excel files: {source_path.name}")
        return pd.read_excel(source_path, sheet_name=sheet, engine="openpyxl", dtype=object)
    if suffix == ".csv":
        return pd.read_csv(source_path, dtype=object, encoding=encoding, keep_default_na=False)
    if suffix == ".parquet":
        return pd.read_parquet(source_path).astype(object)
    raise ValueError(f"unsupported extension: {suffix}")


class FileRowSource(DataFrameRowSource):
    def __init__(self, sheet: str | None = None, types: Mapping[str, str] | None = None):
        super().__init__(frame=None, types=types)
        self.sheet = sheet
        self.logger = get_logger()

    def before_import(self, config: ImportConfig) -> bool:
        if not config.input_file:
            self.logger.error("no input file configured for import")
            return False

        source_path = Path(config.input_file)
        try:
            self.frame = read_source_dataframe(source_path, self.sheet, config.encoding)
        except (OSError, ValueError) as exc:
            self.logger.error("could not read {}: {}", source_path, exc)
            return False

        self.logger.info("read {} rows from {}", len(self.frame), source_path.name)
        return super().before_import(config)

    def after_import(self) -> None:
        super().after_import()
        self.frame = None
