from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import inspect
from sqlalchemy.engine import Connection
from sqlalchemy.exc import SQLAlchemyError

from tableimport.etl.extract.source import ColumnDefinition
from tableimport.etl.load.quoting import IdentifierQuoter, quote_all
from tableimport.utils.logging import get_logger
from tableimport.worker.errors import SchemaError, store_error_text
from tableimport.worker.notify import ImportListener

CREATE_TABLE_TEMPLATE = "CREATE TABLE {table} ({columns})"


@dataclass
class TargetColumns:
    names: list[str]
    quoted: list[str]
    created: bool = False

    def __len__(self) -> int:
        return len(self.names)


def get_table_columns(conn: Connection, table_name: str) -> list[str]:
    inspector = inspect(conn)
    if not inspector.has_table(table_name):
        return []
    return [column["name"] for column in inspector.get_columns(table_name)]


def build_create_table_sql(
    table_name: str,
    columns: Sequence[ColumnDefinition],
    quoter: IdentifierQuoter,
) -> str:
    column_defs = ", ".join(
        f"{quoter.quote_identifier_if_needed(col.name)} {col.type or ''}".strip()
        for col in columns
    )
    return CREATE_TABLE_TEMPLATE.format(
        table=quoter.quote_identifier_if_needed(table_name),
        columns=column_defs,
    )


def create_table(
    conn: Connection,
    table_name: str,
    columns: Sequence[ColumnDefinition],
    quoter: IdentifierQuoter,
    autonomous: bool = False,
) -> None:
    ddl = build_create_table_sql(table_name, columns, quoter)
    get_logger().debug("creating table: {}", ddl)
    try:
        conn.exec_driver_sql(ddl)
        if autonomous:
            conn.commit()
    except SQLAlchemyError as exc:
        raise SchemaError(
            f"Could not create table to import to: {store_error_text(exc)}"
        ) from exc


def resolve_target_columns(
    conn: Connection,
    table_name: str,
    columns: Sequence[ColumnDefinition],
    quoter: IdentifierQuoter,
    listener: ImportListener,
    autonomous: bool = False,
) -> TargetColumns:
    if not columns:
        raise SchemaError("No columns provided by the import plugin.")

    try:
        table_columns = get_table_columns(conn, table_name)
    except SQLAlchemyError as exc:
        raise SchemaError(
            f"Could not read columns of table '{table_name}': {store_error_text(exc)}"
        ) from exc

    if not table_columns:
        create_table(conn, table_name, columns, quoter, autonomous=autonomous)
        names = [col.name for col in columns]
        return TargetColumns(names=names, quoted=quote_all(quoter, names), created=True)

    if len(table_columns) < len(columns):
        listener.warn(
            f"Table '{table_name}' has less columns than there are columns in the data to be "
            "imported. Excessive data columns will be ignored."
        )
        names = table_columns
    elif len(table_columns) > len(columns):
        listener.info(
            f"Table '{table_name}' has more columns than there are columns in the data to be "
            "imported. Some columns in the table will be left empty."
        )
        names = table_columns[: len(columns)]
    else:
        names = table_columns

    return TargetColumns(names=names, quoted=quote_all(quoter, names))
