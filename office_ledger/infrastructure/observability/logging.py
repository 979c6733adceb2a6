"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger
from office_ledger.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_reconciliation(charge_id: str, entry_id: str, path: str, amount_cents: int) -> None:
    """Log which ledger entry confirmed a charge payment"""
    logging.info(
        "Charge reconciled",
        extra={
            "charge_id": charge_id,
            "entry_id": entry_id,
            "step": "charge_paid",
            "reconciliation_path": path,
            "amount_cents": amount_cents,
        },
    )


def log_payable_payment(payable_id: str, entry_id: str, amount_cents: int) -> None:
    """Log the outflow written for a paid payable"""
    logging.info(
        "Payable paid",
        extra={
            "payable_id": payable_id,
            "entry_id": entry_id,
            "step": "payable_paid",
            "amount_cents": amount_cents,
        },
    )
