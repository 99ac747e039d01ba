from __future__ import annotations

from typing import Iterable, Protocol

from sqlalchemy.engine import Dialect


class IdentifierQuoter(Protocol):
    def quote_identifier_if_needed(self, name: str) -> str: ...


class DialectQuoter:
    def __init__(self, dialect: Dialect):
        self.preparer = dialect.identifier_preparer

    def quote_identifier_if_needed(self, name: str) -> str:
        return self.preparer.quote(name)


def quote_all(quoter: IdentifierQuoter, names: Iterable[str]) -> list[str]:
    return [quoter.quote_identifier_if_needed(name) for name in names]
