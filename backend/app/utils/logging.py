"""Structured logging for upstream model calls."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredUpstreamLogger:
    """Structured logger for image-edit and vision-analysis calls."""

    def log_call(
        self,
        service: str,
        model: str,
        outcome: str,
        latency_ms: float,
        status_code: int | None = None,
        error_reason: str | None = None,
    ) -> None:
        """Log one upstream call with structured data."""
        log_data: dict[str, Any] = {
            "service": service,
            "model": model,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if status_code is not None:
            log_data["status_code"] = status_code
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Upstream call: {service} ({model}) - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
