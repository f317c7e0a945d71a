"""Metrics helper utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Union

from opentelemetry import metrics as otel_metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.metrics import Counter, Histogram, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

if TYPE_CHECKING:  # pragma: no cover
    from .config import TelemetryConfig

_METER_PROVIDER: MeterProvider | None = None
_METER: Meter | None = None
_INSTRUMENTS: dict[str, Union[Counter, Histogram]] = {}

# Metric names with these suffixes are distributions, everything else counts.
_HISTOGRAM_SUFFIXES = ("_seconds", "_ms")

MetricAttributes = Mapping[str, Union[str, bool, int, float]]


def get_meter(name: str = "seabattle") -> Meter:
    global _METER
    if _METER is None:
        _METER = otel_metrics.get_meter(name)
    return _METER


def init_metrics(config: TelemetryConfig) -> Meter:
    global _METER_PROVIDER, _METER, _INSTRUMENTS

    readers = []
    if config.otlp_metrics_endpoint:
        exporter = OTLPMetricExporter(endpoint=config.otlp_metrics_endpoint, insecure=True)
        readers.append(
            PeriodicExportingMetricReader(
                exporter, export_interval_millis=config.metrics_export_interval_ms
            )
        )

    provider = MeterProvider(
        resource=Resource.create(config.resource_dict()), metric_readers=readers
    )
    otel_metrics.set_meter_provider(provider)

    _METER_PROVIDER = provider
    _METER = provider.get_meter(config.service_name)
    _INSTRUMENTS = {}
    return _METER


def record_game_metric(name: str, value: float, attrs: MetricAttributes | None = None) -> None:
    """Add ``value`` to the counter (or histogram) called ``name``."""
    instrument = _INSTRUMENTS.get(name)
    if instrument is None:
        meter = get_meter()
        if name.endswith(_HISTOGRAM_SUFFIXES):
            instrument = meter.create_histogram(name)
        else:
            instrument = meter.create_counter(name)
        _INSTRUMENTS[name] = instrument
    if isinstance(instrument, Histogram):
        instrument.record(value, attributes=attrs or {})
    else:
        instrument.add(value, attributes=attrs or {})
