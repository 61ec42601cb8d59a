"""
Tracing

Holds the OpenTelemetry tracer provider used for discovery and query spans.
Spans are exported to Zipkin in batches. The provider can be rebuilt when
the config file changes; spans started afterwards use the new provider.
"""

import threading
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from opentelemetry import trace
from opentelemetry.exporter.zipkin.json import ZipkinExporter
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased

from topology.config import Settings

logger = logging.getLogger(__name__)

TRACER_NAME = "karavi-topology"

ExporterFactory = Callable[[str], SpanExporter]


def _zipkin_exporter(uri: str) -> SpanExporter:
    return ZipkinExporter(endpoint=uri)


def init_tracer_provider(
    uri: str,
    probability: float,
    service_name: str = TRACER_NAME,
    exporter_factory: ExporterFactory = _zipkin_exporter,
) -> TracerProvider:
    """
    Build a tracer provider that samples `probability` of traces.

    Probabilities outside [0, 1] are clamped.

    Raises:
        ValueError: When `uri` is empty
    """
    if not uri or not uri.strip():
        raise ValueError("zipkin uri is empty")

    rate = min(max(probability, 0.0), 1.0)
    provider = TracerProvider(
        sampler=TraceIdRatioBased(rate),
        resource=Resource.create({SERVICE_NAME: service_name or TRACER_NAME}),
    )
    provider.add_span_processor(BatchSpanProcessor(exporter_factory(uri.strip())))
    return provider


class Tracing:
    """
    Replaceable tracer provider.

    Starts with a no-op provider, so spans cost nothing until configure()
    succeeds.
    """

    def __init__(self, provider: Optional[trace.TracerProvider] = None, exporter_factory: ExporterFactory = _zipkin_exporter):
        self._provider = provider or trace.NoOpTracerProvider()
        self._exporter_factory = exporter_factory
        self._lock = threading.Lock()

    @property
    def provider(self) -> trace.TracerProvider:
        with self._lock:
            return self._provider

    def configure(self, settings: Settings) -> bool:
        """
        Rebuild the provider from the ZIPKIN_* settings.

        On failure the previous provider stays in place.

        Returns:
            True when a new provider was installed
        """
        try:
            provider = init_tracer_provider(
                settings.zipkin_uri,
                settings.zipkin_probability,
                settings.zipkin_service_name,
                self._exporter_factory,
            )
        except ValueError as e:
            logger.error(f"Tracing initialization failed: {e}")
            return False

        with self._lock:
            previous, self._provider = self._provider, provider
        self._shutdown(previous)

        logger.info(
            f"Configured tracing: uri={settings.zipkin_uri}, service={settings.zipkin_service_name}, "
            f"probability={settings.zipkin_probability}"
        )
        return True

    @contextmanager
    def start_span(self, name: str) -> Iterator[trace.Span]:
        tracer = self.provider.get_tracer(TRACER_NAME)
        with tracer.start_as_current_span(name) as span:
            yield span

    def shutdown(self) -> None:
        self._shutdown(self.provider)

    @staticmethod
    def _shutdown(provider: trace.TracerProvider) -> None:
        # NoOpTracerProvider has no shutdown
        shutdown = getattr(provider, "shutdown", None)
        if shutdown is not None:
            shutdown()
