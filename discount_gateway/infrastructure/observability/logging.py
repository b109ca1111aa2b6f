"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

from pythonjsonlogger.json import JsonFormatter

from discount_gateway.config import settings


class CustomJsonFormatter(JsonFormatter):
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


def log_recommendation(request_id: str, invoice_id: str, action: str, reason: str) -> None:
    """Log a recomputed recommendation for audit reproducibility"""
    logging.info(
        "Recommendation updated",
        extra={
            "request_id": request_id,
            "invoice_id": invoice_id,
            "step": "recommendation",
            "action": action,
            "reason": reason,
        },
    )


def log_import(request_id: str, user_id: str, imported: int, skipped: int, duration_ms: float) -> None:
    """Log CSV import outcome"""
    logging.info(
        "Import completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "import_complete",
            "imported": imported,
            "skipped": skipped,
            "duration_ms": duration_ms,
        },
    )


def log_refresh(request_id: str, user_id: str, updated: int, skipped: int, duration_ms: float) -> None:
    """Log batch refresh outcome"""
    logging.info(
        "Refresh completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": "refresh_complete",
            "updated": updated,
            "skipped": skipped,
            "duration_ms": duration_ms,
        },
    )
