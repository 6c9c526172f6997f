"""Logging and Prometheus instrumentation shared by the API and the CLI."""

from recipebox.observability.logging import LogContext, configure_logging
from recipebox.observability.metrics import get_metrics

__all__ = ["LogContext", "configure_logging", "get_metrics"]
