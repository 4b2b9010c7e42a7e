"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from pocket_ledger.config import settings


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


def log_loan_created(user_id: str, loan_id: str, total_amount: int, schedule_count: int) -> None:
    logging.info(
        "Loan created",
        extra={
            "user_id": user_id,
            "loan_id": loan_id,
            "step": "loan_created",
            "total_amount": total_amount,
            "schedule_count": schedule_count,
        },
    )


def log_payment(user_id: str, loan_id: str, schedule_id: str, amount: int, remaining_amount: int) -> None:
    """Log structured payment outcome for reconciliation"""
    logging.info(
        "Installment paid",
        extra={
            "user_id": user_id,
            "loan_id": loan_id,
            "schedule_id": schedule_id,
            "step": "schedule_paid",
            "amount": amount,
            "remaining_amount": remaining_amount,
        },
    )


def log_reminder(user_id: str, key: str, level: str, message: str) -> None:
    log = logging.warning if level == "urgent" else logging.info
    log(
        message,
        extra={
            "user_id": user_id,
            "reminder_key": key,
            "step": "loan_reminder",
            "reminder_level": level,
        },
    )
