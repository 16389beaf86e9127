"""Business metrics for the activity log."""

from opentelemetry import metrics

from .logging_config import get_logger

logger = get_logger(__name__)

meter = metrics.get_meter(__name__)

# HTTP Request Metrics
http_request_duration = meter.create_histogram(
    name="http_request_duration_seconds",
    description="Duration of HTTP requests in seconds",
    unit="s",
)

http_requests_total = meter.create_counter(
    name="http_requests_total",
    description="Total number of HTTP requests",
)

http_request_errors = meter.create_counter(
    name="http_request_errors_total",
    description="Total number of HTTP request errors",
)

# Business Metrics
logs_recorded_total = meter.create_counter(
    name="activity_logs_recorded_total",
    description="Total number of activity log entries written",
)

undo_operations_total = meter.create_counter(
    name="undo_operations_total",
    description="Total number of undo requests by outcome",
)

missing_templates_total = meter.create_counter(
    name="log_missing_templates_total",
    description="Log entries rendered without a description template",
)

entities_deleted_total = meter.create_counter(
    name="entities_soft_deleted_total",
    description="Total number of soft-deleted records, direct and cascaded",
)

entities_restored_total = meter.create_counter(
    name="entities_restored_total",
    description="Total number of records restored by undo",
)


def record_http_request(method: str, endpoint: str, status_code: int, duration: float):
    """Record HTTP request metrics."""
    labels = {"method": method, "endpoint": endpoint, "status_code": str(status_code)}

    http_request_duration.record(duration, labels)
    http_requests_total.add(1, labels)

    if status_code >= 400:
        http_request_errors.add(1, labels)


def record_log_written(event: str, log_type: str):
    logs_recorded_total.add(1, {"event": event, "type": log_type})


def record_undo(outcome: str, event: str):
    undo_operations_total.add(1, {"outcome": outcome, "event": event})


def record_missing_template(event: str):
    missing_templates_total.add(1, {"event": event})


def record_soft_delete(kind: str, origin: str, count: int = 1):
    if count:
        entities_deleted_total.add(count, {"kind": kind, "origin": origin})


def record_restore(kind: str, count: int = 1):
    if count:
        entities_restored_total.add(count, {"kind": kind})
