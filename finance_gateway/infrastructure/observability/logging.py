"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List
from pythonjsonlogger import jsonlogger
from finance_gateway.config import settings


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


def log_batch_update(
    request_id: str,
    user_id: str,
    operation: str,
    updated_count: int,
    failed_ids: List[str],
    duration_ms: float,
) -> None:
    """Log structured outcome of a bulk update (invoice paid toggle, due date recalculation)"""
    level = logging.WARNING if failed_ids else logging.INFO
    logging.log(
        level,
        "Batch update completed",
        extra={
            "request_id": request_id,
            "user_id": user_id,
            "step": operation,
            "updated_count": updated_count,
            "failed_ids": failed_ids,
            "duration_ms": duration_ms,
        },
    )
