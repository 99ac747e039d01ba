from __future__ import annotations

from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from tableimport.config.models import ImportConfig
from tableimport.etl.extract.frame import DataFrameRowSource
from tableimport.etl.extract.readers import FileRowSource, read_source_dataframe
from tableimport.etl.extract.source import ColumnDefinition
from tableimport.utils.values import to_db_value


def _drain(source) -> list[list]:
    rows = []
    while row := source.next():
        rows.append(row)
    return rows


def test_to_db_value_unwraps_pandas_and_numpy():
    assert to_db_value(np.int64(7)) == 7
    assert type(to_db_value(np.int64(7))) is int
    assert to_db_value(float("nan")) is None
    assert to_db_value(pd.NA) is None
    assert to_db_value(pd.NaT) is None
    assert to_db_value(pd.Timestamp("2024-01-02 03:04:05")) == datetime(2024, 1, 2, 3, 4, 5)
    assert to_db_value("text") == "text"


def test_frame_source_columns_use_declared_types():
    frame = pd.DataFrame({"id": [1, 2], "name": ["a", "b"]})
    source = DataFrameRowSource(frame, types={"id": "INTEGER"})

    assert source.get_columns() == [ColumnDefinition("id", "INTEGER"), ColumnDefinition("name", "")]


def test_frame_source_yields_plain_rows_then_stops():
    frame = pd.DataFrame({"id": [1, 2], "score": [1.5, np.nan]})
    source = DataFrameRowSource(frame)

    assert source.before_import(ImportConfig()) is True
    assert _drain(source) == [[1, 1.5], [2, None]]
    assert source.next() is None
    source.after_import()
    assert source.next() is None


def test_frame_source_without_frame_rejects():
    assert DataFrameRowSource().before_import(ImportConfig()) is False


def test_read_source_dataframe_rejects_unknown_extension(tmp_path):
    path = tmp_path / "data.json"
    path.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="unsupported extension"):
        read_source_dataframe(path)


def test_read_source_dataframe_requires_sheet_for_excel(tmp_path):
    path = tmp_path / "data.xlsx"
    path.write_bytes(b"")
    with pytest.raises(ValueError, match="sheet is required"):
        read_source_dataframe(path)


def test_file_source_reads_csv_as_text(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text("id,name\n1,Ann\n2,\n", encoding="utf-8")
    source = FileRowSource()

    assert source.before_import(ImportConfig(input_file=str(path))) is True
    assert source.get_columns() == [ColumnDefinition("id"), ColumnDefinition("name")]
    assert _drain(source) == [["1", "Ann"], ["2", ""]]
    source.after_import()
    assert source.frame is None


def test_file_source_honours_encoding(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes("city\nSão Paulo\n".encode("latin-1"))
    source = FileRowSource()

    assert source.before_import(ImportConfig(input_file=str(path), encoding="latin-1")) is True
    assert _drain(source) == [["São Paulo"]]


def test_file_source_rejects_missing_file(tmp_path):
    source = FileRowSource()
    assert source.before_import(ImportConfig(input_file=str(tmp_path / "missing.csv"))) is False
    assert source.before_import(ImportConfig()) is False
