from __future__ import annotations

from typing import Any, NamedTuple, Protocol, Sequence

from tableimport.config.models import ImportConfig


class ColumnDefinition(NamedTuple):
    name: str
    type: str = ""


class RowSource(Protocol):
    def before_import(self, config: ImportConfig) -> bool: ...

    def get_columns(self) -> Sequence[ColumnDefinition]: ...

    def next(self) -> Sequence[Any] | None: ...

    def after_import(self) -> None: ...
