"""
Prometheus metrics for the booking engine.

Service operations are timed by ``BaseService.measure_operation`` and recorded
here; lock and notification outcomes are counted by their modules.
"""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

# Custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "tractorhire_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "tractorhire_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "tractorhire_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

unit_lock_total = Counter(
    "tractorhire_unit_lock_total",
    "Per-unit approval lock outcomes",
    ["action", "outcome"],
    registry=REGISTRY,
)

notifications_total = Counter(
    "tractorhire_notifications_total",
    "Notification dispatch outcomes",
    ["event", "outcome"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers do not touch metric objects directly."""

    def record_service_operation(
        self,
        service: str,
        operation: str,
        duration: float,
        status: str,
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(
            duration
        )
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    def record_unit_lock(self, action: str, outcome: str) -> None:
        unit_lock_total.labels(action=action, outcome=outcome).inc()

    def record_notification(self, event: str, outcome: str) -> None:
        notifications_total.labels(event=event, outcome=outcome).inc()

    def get_metrics(self) -> bytes:
        return generate_latest(REGISTRY)


prometheus_metrics = PrometheusMetrics()
