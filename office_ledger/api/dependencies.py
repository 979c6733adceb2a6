"""Dependency injection for FastAPI endpoints"""

import uuid
from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session
from office_ledger.domain.engine import LedgerEngine
from office_ledger.infrastructure.database.repositories import ChargeRepository, LedgerRepository, PayableRepository
from office_ledger.infrastructure.database.session import get_db
from office_ledger.infrastructure.database.unit_of_work import SqlAlchemyTransaction


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_engine(db: Session = Depends(get_db)) -> LedgerEngine:
    """Ledger engine bound to the request's session"""
    return LedgerEngine(
        charges=ChargeRepository(db),
        ledger=LedgerRepository(db),
        payables=PayableRepository(db),
        transaction=SqlAlchemyTransaction(db),
    )


def parse_id(raw_id: str, resource: str) -> uuid.UUID:
    """Parse a path identifier, rejecting malformed values with 400"""
    try:
        return uuid.UUID(raw_id)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {resource} ID format")
