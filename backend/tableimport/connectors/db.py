from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url


@dataclass(frozen=True)
class HealthcheckResult:
    ok: bool
    details: dict[str, str]


def _enable_sqlite_transactions(engine: Engine) -> None:
    # pysqlite only opens transactions before DML on its own; take over so
    # CREATE TABLE and SAVEPOINT run inside the import transaction.
    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_db_engine(url: str, connect_timeout_seconds: int = 15) -> Engine:
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        engine = create_engine(
            parsed,
            connect_args={"timeout": connect_timeout_seconds, "check_same_thread": False},
        )
        _enable_sqlite_transactions(engine)
        return engine

    return create_engine(
        parsed,
        pool_pre_ping=True,
        connect_args={"connect_timeout": connect_timeout_seconds},
    )


def run_healthcheck(engine: Engine) -> HealthcheckResult:
    details: dict[str, str] = {"dialect": engine.dialect.name}
    try:
        with engine.connect() as conn:
            conn.execute(text("select 1")).scalar_one()
            version = conn.dialect.server_version_info
            details["server_version"] = (
                ".".join(str(part) for part in version) if version else "unknown"
            )
        details["connection"] = "ok"
    except Exception as exc:
        details["connection"] = f"failed: {exc}"

    return HealthcheckResult(ok=details["connection"] == "ok", details=details)
