"""
Shared metrics configuration for the access-rules evaluator.
"""

from typing import Dict, Any, Optional
import threading

from prometheus_client import Counter, Histogram, CollectorRegistry, REGISTRY


class MetricsCollector:
    """Prometheus metrics for authorization decisions."""

    def __init__(self, namespace: str = "access_rules", registry: Optional[CollectorRegistry] = None):
        self.namespace = namespace
        self.registry = registry if registry is not None else REGISTRY
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up decision metrics."""

        self._metrics["authorization_decisions_total"] = Counter(
            "authorization_decisions_total",
            "Total authorization decisions",
            ["decision", "reason"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["condition_errors_total"] = Counter(
            "condition_errors_total",
            "Total rule conditions that raised during evaluation",
            ["error_type"],
            namespace=self.namespace,
            registry=self.registry
        )

        self._metrics["authorization_evaluation_seconds"] = Histogram(
            "authorization_evaluation_seconds",
            "Time spent evaluating a single authorization decision",
            namespace=self.namespace,
            registry=self.registry,
            buckets=(0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.01, 0.05)
        )

    def record_decision(self, allowed: bool, reason: str, duration_seconds: float):
        """Record an authorization decision."""
        decision = "allow" if allowed else "deny"
        self._metrics["authorization_decisions_total"].labels(decision=decision, reason=reason).inc()
        self._metrics["authorization_evaluation_seconds"].observe(duration_seconds)

    def record_condition_error(self, error_type: str):
        """Record a condition that raised."""
        self._metrics["condition_errors_total"].labels(error_type=error_type).inc()


_collector: Optional[MetricsCollector] = None
_collector_lock = threading.Lock()


def get_metrics_collector() -> MetricsCollector:
    """Get the process-wide metrics collector."""
    global _collector
    if _collector is None:
        with _collector_lock:
            if _collector is None:
                _collector = MetricsCollector()
    return _collector


def set_metrics_collector(collector: MetricsCollector) -> None:
    """Replace the process-wide metrics collector."""
    global _collector
    with _collector_lock:
        _collector = collector
