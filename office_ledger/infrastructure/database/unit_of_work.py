"""Transactional scope over a SQLAlchemy session"""

import logging
from typing import Callable, TypeVar
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from office_ledger.domain.exceptions import StorageFailure

T = TypeVar("T")

logger = logging.getLogger(__name__)


class SqlAlchemyTransaction:
    """
    All-or-nothing execution of store operations sharing one session.

    ``fn`` runs against the session's current transaction; success commits,
    any exception rolls back. Database errors surface as StorageFailure,
    domain errors propagate unchanged.
    """

    def __init__(self, db: Session):
        self.db = db

    def run_atomic(self, fn: Callable[[], T]) -> T:
        try:
            result = fn()
            self.db.commit()
            return result
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Transaction rolled back: {e}")
            raise StorageFailure("Storage operation failed, no changes were applied") from e
        except Exception:
            self.db.rollback()
            raise
