from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .exceptions import handle_persistence_error


class UnitOfWork:
    """Commit-or-rollback session scope; store errors surface as ``PersistenceError``."""

    def __init__(self, SessionLocal: sessionmaker[Session]):
        self.SessionLocal = SessionLocal

    @contextmanager
    def begin(self, operation: str = "unit of work") -> Iterator[Session]:
        try:
            s = self.SessionLocal()
        except SQLAlchemyError as e:
            raise handle_persistence_error(e, operation) from e
        try:
            yield s
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise handle_persistence_error(e, operation) from e
        except Exception:
            s.rollback()
            raise
        finally:
            s.close()
