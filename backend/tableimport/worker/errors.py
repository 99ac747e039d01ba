from __future__ import annotations

from sqlalchemy.exc import DBAPIError, SQLAlchemyError


class ImportFailure(Exception):
    """Fatal condition that ends an import run."""


class ImportRejected(ImportFailure):
    pass


class SchemaError(ImportFailure):
    pass


class RowError(ImportFailure):
    pass


class TransactionError(ImportFailure):
    pass


class ImportInterrupted(ImportFailure):
    def __init__(self, message: str = "Error while importing data: Interrupted."):
        super().__init__(message)


def store_error_text(exc: SQLAlchemyError) -> str:
    """Return the driver's own message, without SQLAlchemy's statement echo."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig).strip()
    return str(exc).strip()
