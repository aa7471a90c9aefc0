"""
Prometheus metrics integration for CrispHooks.

Quick Start:
    >>> from crisphooks.monitoring.prometheus import PrometheusMetrics, start_metrics_server
    >>> from crisphooks.core.listeners import MetricsHookListener
    >>>
    >>> start_metrics_server(port=8000)
    >>> hooks = CrispHooks(
    ...     config=HooksConfig(metrics=MetricsHookListener(metrics=PrometheusMetrics()))
    ... )

Requirements:
    pip install 'crisphooks[metrics]'
"""

from typing import Any

from crisphooks.core.exceptions import MissingDependencyError
from crisphooks.core.logger import get_logger

try:
    from prometheus_client import REGISTRY, Counter, Histogram, start_http_server

    PROMETHEUS_AVAILABLE = True
except ImportError:  # pragma: no cover
    PROMETHEUS_AVAILABLE = False
    REGISTRY: Any = None  # type: ignore[no-redef]
    Counter: Any = None  # type: ignore[no-redef]
    Histogram: Any = None  # type: ignore[no-redef]
    start_http_server: Any = None  # type: ignore[no-redef]


logger = get_logger(__name__)


class PrometheusMetrics:
    """
    Prometheus-compatible metrics collector for hook triggers.

    Exposes the following metrics:
        - hooks_trigger_total: Counter of triggers by hook name and outcome
        - hooks_cleanup_total: Counter of error handler runs by hook name and outcome
        - hooks_trigger_duration_seconds: Histogram of trigger durations

    Implements the same record_trigger/record_cleanup interface as HookMetrics,
    so either can back a MetricsHookListener.
    """

    def __init__(self, prefix: str = "hooks", registry: Any = None):
        """
        Initialize Prometheus metrics.

        Args:
            prefix: Metric name prefix (default: "hooks")
            registry: CollectorRegistry to register with (default: global REGISTRY)

        Raises:
            MissingDependencyError: If prometheus-client is not installed
        """
        if not PROMETHEUS_AVAILABLE:  # pragma: no cover
            raise MissingDependencyError("prometheus_client", "Prometheus metrics")

        self._prefix = prefix
        registry = registry if registry is not None else REGISTRY

        self._trigger_total = Counter(
            f"{prefix}_trigger_total",
            "Total hook triggers",
            ["hook_name", "outcome"],
            registry=registry,
        )

        self._cleanup_total = Counter(
            f"{prefix}_cleanup_total",
            "Total error handler runs during unwinds",
            ["hook_name", "outcome"],
            registry=registry,
        )

        self._trigger_duration = Histogram(
            f"{prefix}_trigger_duration_seconds",
            "Hook trigger duration in seconds",
            ["hook_name"],
            buckets=[0.0005, 0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 5.0],
            registry=registry,
        )

    def record_trigger(self, hook_name: str, success: bool, duration: float) -> None:
        """
        Record a finished trigger.

        Args:
            hook_name: Name of the triggered hook
            success: Whether every handler succeeded
            duration: Trigger duration in seconds
        """
        outcome = "success" if success else "failed"
        self._trigger_total.labels(hook_name=hook_name, outcome=outcome).inc()
        self._trigger_duration.labels(hook_name=hook_name).observe(duration)

    def record_cleanup(self, hook_name: str, failed: bool = False) -> None:
        outcome = "failed" if failed else "success"
        self._cleanup_total.labels(hook_name=hook_name, outcome=outcome).inc()


def start_metrics_server(port: int = 8000, addr: str = "0.0.0.0") -> None:
    """
    Start a Prometheus HTTP metrics server.

    Args:
        port: Port to listen on (default: 8000)
        addr: Address to bind to (default: 0.0.0.0 for all interfaces)

    Raises:
        MissingDependencyError: If prometheus-client is not installed
    """
    if not PROMETHEUS_AVAILABLE:  # pragma: no cover
        raise MissingDependencyError("prometheus_client", "Prometheus metrics server")

    start_http_server(port, addr)
    logger.info(f"Prometheus metrics server started on port {port}")


def is_prometheus_available() -> bool:
    """Check if prometheus-client is installed."""
    return PROMETHEUS_AVAILABLE
