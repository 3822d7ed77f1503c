"""Shared telemetry: logging setup, OpenTelemetry config, and tracing helpers."""

from printflow.shared.telemetry.logging import get_logger, setup_logging
from printflow.shared.telemetry.tracing import (
    add_span_attributes,
    add_span_event,
    traced,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "traced",
    "add_span_attributes",
    "add_span_event",
]
