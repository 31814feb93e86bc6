from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Protocol, Sequence

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from accountauth.models import Base, UserAccount
from accountauth.utils import now_millis


class DuplicateKeyError(Exception):
    pass


class AccountStore(Protocol):
    """Keyed record store the authenticator reads and writes through.

    Only three query shapes are needed: exact-match select, insert and
    partial update by id. Anything that honours them, plus ``initialize``
    for schema setup, can back an ``AccountAuthenticator``.
    """

    def initialize(self) -> None:
        ...

    def find_by_filter(self, filters: Mapping[str, Any]) -> Sequence[UserAccount]:
        ...

    def insert(self, account: UserAccount) -> None:
        ...

    def update_by_id(self, account_id: str, fields: Mapping[str, Any], now: int | None = None) -> None:
        ...


class SqlAccountStore:
    def __init__(self, session: Session) -> None:
        self.session = session

    def initialize(self) -> None:
        Base.metadata.create_all(self.session.get_bind(), tables=[UserAccount.__table__])

    def find_by_filter(self, filters: Mapping[str, Any]) -> list[UserAccount]:
        return list(self.session.query(UserAccount).filter_by(**filters).all())

    def insert(self, account: UserAccount) -> None:
        with self._transaction():
            self.session.add(account)

    def update_by_id(self, account_id: str, fields: Mapping[str, Any], now: int | None = None) -> None:
        values = dict(fields)
        values["updated_at"] = now if now is not None else now_millis()
        statement = update(UserAccount).where(UserAccount.id == account_id).values(**values)
        with self._transaction():
            self.session.execute(statement)

    @contextmanager
    def _transaction(self) -> Iterator[None]:
        try:
            yield
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            raise DuplicateKeyError(str(exc.orig)) from exc
        except Exception:
            self.session.rollback()
            raise
