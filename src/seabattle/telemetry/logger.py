"""Logging setup: console output plus an optional OTLP log handler."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import TelemetryConfig

_LOGGER: logging.Logger | None = None
_CONSOLE_HANDLER: logging.Handler | None = None
_OTLP_HANDLER: logging.Handler | None = None


class _OtelContextFilter(logging.Filter):
    """Ensures trace/span placeholders exist even when no context is active."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        if not hasattr(record, "otelTraceID"):
            record.otelTraceID = "0"
        if not hasattr(record, "otelSpanID"):
            record.otelSpanID = "0"
        return True


def get_logger(name: str = "seabattle") -> logging.Logger:
    """Return the shared ``seabattle`` logger (created on first use)."""
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = logging.getLogger(name)
    return _LOGGER


def init_console_logging(config: TelemetryConfig) -> logging.Handler:
    """Attach one stderr handler to the ``seabattle`` logger hierarchy."""
    global _CONSOLE_HANDLER
    package_logger = logging.getLogger("seabattle")
    package_logger.setLevel(config.log_level.upper())
    if _CONSOLE_HANDLER is None:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(config.log_format))
        handler.addFilter(_OtelContextFilter())
        package_logger.addHandler(handler)
        _CONSOLE_HANDLER = handler
    return _CONSOLE_HANDLER


def init_logging(config: TelemetryConfig) -> logging.Logger:
    """Export ``seabattle`` log records over OTLP."""
    global _OTLP_HANDLER
    logger = get_logger(config.service_name)
    if _OTLP_HANDLER is not None:
        return logger

    from opentelemetry._logs import set_logger_provider
    from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
    from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
    from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
    from opentelemetry.sdk.resources import Resource

    provider = LoggerProvider(resource=Resource.create(config.resource_dict()))
    if config.otlp_logs_endpoint:
        exporter = OTLPLogExporter(endpoint=config.otlp_logs_endpoint, insecure=True)
        provider.add_log_record_processor(BatchLogRecordProcessor(exporter))
    set_logger_provider(provider)

    handler = LoggingHandler(level=logging.INFO, logger_provider=provider)
    handler.addFilter(_OtelContextFilter())
    logging.getLogger("seabattle").addHandler(handler)
    _OTLP_HANDLER = handler
    return logger
