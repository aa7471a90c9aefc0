"""
Hook monitoring and observability utilities

Quick Start:
    >>> from crisphooks.monitoring import setup_hook_logging
    >>> logger = setup_hook_logging(json_format=True)

    # Enable Prometheus metrics (requires prometheus-client)
    >>> from crisphooks.monitoring.prometheus import PrometheusMetrics, start_metrics_server
    >>> start_metrics_server(port=8000)
    >>> metrics = PrometheusMetrics()
"""

from .logging import HookContextFilter, HookJsonFormatter, hook_context, hook_scope, setup_hook_logging
from .metrics import HookMetrics
from .prometheus import PrometheusMetrics, is_prometheus_available, start_metrics_server

__all__ = [
    "HookContextFilter",
    "HookJsonFormatter",
    "HookMetrics",
    "PrometheusMetrics",
    "hook_context",
    "hook_scope",
    "is_prometheus_available",
    "setup_hook_logging",
    "start_metrics_server",
]
