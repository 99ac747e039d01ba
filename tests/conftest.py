from __future__ import annotations

from typing import Any, Callable, Sequence

import pytest
from sqlalchemy import text

from tableimport.config.loader import DB_URL_ENV_KEY
from tableimport.connectors.db import create_db_engine
from tableimport.etl.extract.source import ColumnDefinition


class RecordingListener:
    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []

    def _messages(self, kind: str) -> list[str]:
        return [payload for name, payload in self.events if name == kind]

    @property
    def infos(self) -> list[str]:
        return self._messages("info")

    @property
    def warnings(self) -> list[str]:
        return self._messages("warn")

    @property
    def errors(self) -> list[str]:
        return self._messages("error")

    @property
    def created_tables(self) -> list[str]:
        return self._messages("table_created")

    @property
    def finished_calls(self) -> list[bool]:
        return self._messages("finished")

    def info(self, message: str) -> None:
        self.events.append(("info", message))

    def warn(self, message: str) -> None:
        self.events.append(("warn", message))

    def error(self, message: str) -> None:
        self.events.append(("error", message))

    def table_created(self, table: str) -> None:
        self.events.append(("table_created", table))

    def finished(self, success: bool) -> None:
        self.events.append(("finished", success))


class ListRowSource:
    """In-memory row source that counts hook calls."""

    def __init__(
        self,
        columns: Sequence[tuple[str, str]],
        rows: Sequence[Sequence[Any]],
        accept: bool = True,
        on_row: Callable[[int], None] | None = None,
    ):
        self.columns = [ColumnDefinition(name, type_) for name, type_ in columns]
        self.rows = [list(row) for row in rows]
        self.accept = accept
        self.on_row = on_row
        self.before_calls = 0
        self.after_calls = 0
        self.rows_served = 0
        self.config = None

    def before_import(self, config) -> bool:
        self.before_calls += 1
        self.config = config
        return self.accept

    def get_columns(self) -> list[ColumnDefinition]:
        return self.columns

    def next(self) -> list[Any] | None:
        if self.rows_served >= len(self.rows):
            return None
        row = self.rows[self.rows_served]
        if self.on_row is not None:
            self.on_row(self.rows_served)
        self.rows_served += 1
        return row

    def after_import(self) -> None:
        self.after_calls += 1


@pytest.fixture
def engine(tmp_path):
    db_engine = create_db_engine(f"sqlite:///{tmp_path / 'import.db'}")
    yield db_engine
    db_engine.dispose()


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def make_source() -> Callable[..., ListRowSource]:
    return ListRowSource


@pytest.fixture
def query(engine) -> Callable[..., list[tuple]]:
    def _query(sql: str, **params: Any) -> list[tuple]:
        with engine.connect() as conn:
            return [tuple(row) for row in conn.execute(text(sql), params).fetchall()]

    return _query


@pytest.fixture
def execute(engine) -> Callable[[str], None]:
    def _execute(sql: str) -> None:
        with engine.begin() as conn:
            conn.exec_driver_sql(sql)

    return _execute


@pytest.fixture
def clean_db_url_env(monkeypatch):
    # setenv first so monkeypatch restores the variable's absence afterwards
    monkeypatch.setenv(DB_URL_ENV_KEY, "placeholder")
    monkeypatch.delenv(DB_URL_ENV_KEY)
