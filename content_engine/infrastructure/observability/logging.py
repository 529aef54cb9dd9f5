import structlog
import logging
import sys
from typing import Dict, Any, Optional
from datetime import datetime
import os


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    service_name: str = "content-engine",
    environment: Optional[str] = None
) -> None:
    """Setup structured logging configuration"""

    # Configure Python logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO)
    )

    # Processors for structlog
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        add_service_context,
    ]

    # Add appropriate renderer based on format
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    # Configure structlog
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Set service name in context
    structlog.contextvars.bind_contextvars(
        service=service_name,
        environment=environment or os.getenv("ENVIRONMENT", "development"),
        version=os.getenv("SERVICE_VERSION", "unknown")
    )


def add_service_context(logger: logging.Logger, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """Add pipeline context to all log entries"""

    # Add timestamp if not present
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.utcnow().isoformat()

    # Pipeline identifiers bound for the running task
    bound = structlog.contextvars.get_contextvars()
    for key in ("trace_id", "content_id", "project_id"):
        if key in bound and key not in event_dict:
            event_dict[key] = bound[key]

    return event_dict


class PipelineLogger:
    """Specialized logger for pipeline operations"""

    def __init__(self, name: str):
        self.logger = structlog.get_logger(name)

    def log_stage_attempt(
        self,
        stage: str,
        content_id: str,
        attempt: int,
        max_attempts: int,
        outcome: str,
        duration_ms: Optional[float] = None,
        error: Optional[str] = None
    ):
        """Log the outcome of one stage attempt"""

        log = self.logger.warning if error else self.logger.info
        log(
            "stage_attempt",
            stage=stage,
            content_id=content_id,
            attempt=attempt,
            max_attempts=max_attempts,
            outcome=outcome,
            duration_ms=duration_ms,
            error=error
        )

    def log_workflow_transition(
        self,
        content_id: str,
        from_node: str,
        to_node: str,
        condition: Optional[str] = None
    ):
        """Log pipeline graph transitions"""

        self.logger.info(
            "workflow_transition",
            content_id=content_id,
            from_node=from_node,
            to_node=to_node,
            condition=condition
        )

    def log_context_update(
        self,
        project_id: str,
        action: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Log context window updates"""

        self.logger.info(
            "context_update",
            project_id=project_id,
            action=action,
            details=details or {}
        )


class MetricsCollector:
    """Collect and export metrics"""

    def __init__(self):
        self.metrics: Dict[str, Any] = {}
        self.logger = structlog.get_logger("content_engine.metrics")

    def record_latency(self, operation: str, duration_ms: float, tags: Optional[Dict[str, str]] = None):
        """Record operation latency"""

        key = f"latency.{operation}"
        if key not in self.metrics:
            self.metrics[key] = {
                "count": 0,
                "sum": 0,
                "min": float('inf'),
                "max": 0
            }

        self.metrics[key]["count"] += 1
        self.metrics[key]["sum"] += duration_ms
        self.metrics[key]["min"] = min(self.metrics[key]["min"], duration_ms)
        self.metrics[key]["max"] = max(self.metrics[key]["max"], duration_ms)

        self.logger.debug(
            "metric",
            metric_type="latency",
            operation=operation,
            duration_ms=duration_ms,
            tags=tags or {}
        )

    def increment_counter(self, name: str, value: int = 1, tags: Optional[Dict[str, str]] = None):
        """Increment a counter metric"""

        if name not in self.metrics:
            self.metrics[name] = 0
        self.metrics[name] += value

        self.logger.debug(
            "metric",
            metric_type="counter",
            name=name,
            value=value,
            tags=tags or {}
        )

    def get_counter(self, name: str) -> int:
        value = self.metrics.get(name, 0)
        return value if isinstance(value, int) else 0

    def get_metrics_summary(self) -> Dict[str, Any]:
        """Get summary of all metrics"""

        summary = {}
        for key, value in self.metrics.items():
            if isinstance(value, dict) and "count" in value:
                # Latency metric
                summary[key] = {
                    "count": value["count"],
                    "avg": value["sum"] / value["count"] if value["count"] > 0 else 0,
                    "min": value["min"] if value["min"] != float('inf') else 0,
                    "max": value["max"]
                }
            else:
                # Counter or gauge
                summary[key] = value

        return summary
