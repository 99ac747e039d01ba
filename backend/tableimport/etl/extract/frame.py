from __future__ import annotations

from typing import Any, Iterator, Mapping

import pandas as pd

from tableimport.config.models import ImportConfig
from tableimport.etl.extract.source import ColumnDefinition
from tableimport.utils.values import to_db_value


class DataFrameRowSource:
    def __init__(self, frame: pd.DataFrame | None = None, types: Mapping[str, str] | None = None):
        self.frame = frame
        self.types = dict(types or {})
        self._rows: Iterator[tuple[Any, ...]] | None = None

    def before_import(self, config: ImportConfig) -> bool:
        if self.frame is None:
            return False
        self._rows = self.frame.itertuples(index=False, name=None)
        return True

    def get_columns(self) -> list[ColumnDefinition]:
        if self.frame is None:
            return []
        return [
            ColumnDefinition(str(name), self.types.get(str(name), ""))
            for name in self.frame.columns
        ]

    def next(self) -> list[Any] | None:
        if self._rows is None:
            return None
        row = next(self._rows, None)
        if row is None:
            return None
        return [to_db_value(value) for value in row]

    def after_import(self) -> None:
        self._rows = None
