import sys

from opentelemetry import metrics
from opentelemetry.exporter.prometheus import PrometheusMetricReader
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import ConsoleMetricExporter, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource


def setup_metrics(app_name: str) -> MeterProvider:
    """Configure OpenTelemetry metrics.

    The Prometheus reader registers with the default prometheus_client
    registry; nothing is served from here. Console output goes to stderr,
    and the final export happens when the caller shuts the provider down.
    """

    resource = Resource.create({"service.name": app_name})

    prometheus_reader = PrometheusMetricReader()
    console_reader = PeriodicExportingMetricReader(ConsoleMetricExporter(out=sys.stderr))

    provider = MeterProvider(resource=resource, metric_readers=[prometheus_reader, console_reader])

    metrics.set_meter_provider(provider)
    return provider
