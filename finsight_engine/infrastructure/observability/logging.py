"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger

from finsight_engine.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def __init__(self, *args, service_name: Optional[str] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.service_name = service_name or settings.service_name

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = self.service_name


def setup_logging(level: Optional[str] = None) -> None:
    """Configure structured JSON logging on the root logger"""
    logger = logging.getLogger()
    logger.setLevel(level or settings.log_level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)


def log_assessment(
    account_count: int,
    risk_levels: Dict[str, int],
    alert_counts: Dict[str, int],
    duration_ms: float,
) -> None:
    """Log structured assessment outcome for analysis"""
    logging.info(
        "Assessment completed",
        extra={
            "step": "assessment_complete",
            "account_count": account_count,
            "risk_levels": risk_levels,
            "alert_counts": alert_counts,
            "duration_ms": duration_ms,
        },
    )
