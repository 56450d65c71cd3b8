"""OpenTelemetry メトリクス定義"""

from __future__ import annotations

from opentelemetry import metrics

_meter = metrics.get_meter("flagsnap", version="0.1.0")

fetch_total = _meter.create_counter(
    name="flagsnap_fetch_total",
    description="Total number of remote flag fetches",
    unit="1",
)

fetch_errors_total = _meter.create_counter(
    name="flagsnap_fetch_errors_total",
    description="Total number of failed fetches or rejected payloads",
    unit="1",
)

fetch_duration_seconds = _meter.create_histogram(
    name="flagsnap_fetch_duration_seconds",
    description="Remote flag fetch duration in seconds",
    unit="s",
)

evaluations_total = _meter.create_counter(
    name="flagsnap_evaluations_total",
    description="Total number of flag evaluations",
    unit="1",
)

stale_total = _meter.create_counter(
    name="flagsnap_stale_total",
    description="Number of times the current snapshot exceeded the staleness ceiling",
    unit="1",
)
