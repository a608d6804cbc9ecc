"""
Explicit transaction scope over a SQLAlchemy session.

Usage::

    with UnitOfWork(db) as uow:
        db.add(course)
        uow.flush()          # assigns generated ids
        ...
    # committed here; any exception inside the block rolls everything back

The block owns the session's transaction from the first statement to
commit/rollback, so nothing else may use the same session meanwhile.
Store errors leave the block as ``TransactionFailed`` carrying the driver's
message, prefixed with ``error_context`` when one is given. Every other
exception leaves unchanged.

A read-only transaction left open on the session is rolled back when the
block starts. Pending changes made before the block are refused with
``RuntimeError`` rather than committed outside the unit.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction

from app.core.exceptions import TransactionFailed


logger = logging.getLogger(__name__)


def store_error_message(exc: SQLAlchemyError) -> str:
    """The underlying driver message, without SQLAlchemy's statement dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class UnitOfWork:
    """Begin/commit/rollback wrapper for one atomic group of writes."""

    def __init__(self, session: Session, name: str = "unit of work", error_context: Optional[str] = None):
        self.session = session
        self.name = name
        self.error_context = error_context
        self._transaction: Optional[SessionTransaction] = None

    def __enter__(self) -> "UnitOfWork":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is None:
            try:
                self.commit()
            except SQLAlchemyError as commit_error:
                self.rollback()
                logger.warning(f"{self.name} failed on commit: {commit_error}")
                raise self._store_failure(commit_error) from commit_error
            return False

        self.rollback()
        logger.warning(f"{self.name} rolled back: {exc}")
        if isinstance(exc, SQLAlchemyError):
            raise self._store_failure(exc) from exc
        return False

    @property
    def active(self) -> bool:
        return self._transaction is not None and self._transaction.is_active

    def begin(self) -> None:
        if self.session.new or self.session.dirty or self.session.deleted:
            raise RuntimeError(f"{self.name} cannot start with uncommitted changes pending")
        if self.session.in_transaction():
            # Reads done earlier in the request autobegin a transaction
            self.session.rollback()
        self._transaction = self.session.begin()

    def flush(self) -> None:
        self.session.flush()

    def commit(self) -> None:
        if self._transaction is None:
            raise RuntimeError(f"{self.name} was never started")
        self.session.commit()
        self._transaction = None

    def rollback(self) -> None:
        if self._transaction is None:
            return
        self.session.rollback()
        self._transaction = None

    def _store_failure(self, exc: SQLAlchemyError) -> TransactionFailed:
        message = store_error_message(exc)
        if self.error_context:
            message = f"{self.error_context}: {message}"
        return TransactionFailed(message)
