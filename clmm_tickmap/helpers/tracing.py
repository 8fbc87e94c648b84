"""
Tracing for RPC account fetches

OpenTelemetry spans around each JSON-RPC request, so slow or failing
account reads can be matched to the command that issued them.

Tracing is off unless CLMM_TICKMAP_TRACING is "console" or "otlp";
OTLP_ENDPOINT overrides the collector URL for the latter. While off,
spans are never created and start_span yields None.
"""

import logging
import os
from contextlib import contextmanager
from typing import Any, Dict, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.trace import Status, StatusCode

from clmm_tickmap import __version__

logger = logging.getLogger(__name__)

EXPORTERS = ("console", "otlp")
DEFAULT_OTLP_ENDPOINT = "http://localhost:4318/v1/traces"


def _make_exporter(exporter_type: str, otlp_endpoint: Optional[str]):
    if exporter_type == "otlp":
        # Installed with the "otlp" extra
        from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter

        endpoint = otlp_endpoint or DEFAULT_OTLP_ENDPOINT
        logger.info(f"Exporting RPC spans to {endpoint}")
        return OTLPSpanExporter(endpoint=endpoint)
    logger.info("Exporting RPC spans to the console")
    return ConsoleSpanExporter()


class TracingClient:
    """
    Span factory for RPC calls

    Attributes:
        tracer: OpenTelemetry tracer, or None when disabled
        enabled: Whether spans are recorded
    """

    def __init__(
        self,
        service_name: str = "clmm-tickmap",
        exporter_type: str = "console",
        otlp_endpoint: Optional[str] = None,
        enabled: bool = True,
    ):
        self.service_name = service_name
        self.enabled = enabled
        self.tracer = None
        if enabled:
            self.tracer = self._install_provider(exporter_type, otlp_endpoint)

    def _install_provider(self, exporter_type: str, otlp_endpoint: Optional[str]):
        provider = TracerProvider(resource=Resource.create({
            SERVICE_NAME: self.service_name,
            SERVICE_VERSION: __version__,
            "solana.cluster": os.getenv("SOLANA_CLUSTER", "mainnet-beta"),
        }))
        provider.add_span_processor(BatchSpanProcessor(_make_exporter(exporter_type, otlp_endpoint)))
        trace.set_tracer_provider(provider)
        logger.info(f"Tracing enabled for {self.service_name} ({exporter_type})")
        return trace.get_tracer(__name__)

    @contextmanager
    def start_span(self, name: str, attributes: Optional[Dict[str, Any]] = None):
        """
        Open a span for the duration of the block

        Args:
            name: Span name, e.g. "rpc.getMultipleAccounts"
            attributes: Values attached to the span as strings

        Yields:
            The active span, or None while tracing is off
        """
        if self.tracer is None:
            yield None
            return

        with self.tracer.start_as_current_span(name) as span:
            for key, value in (attributes or {}).items():
                span.set_attribute(key, str(value))
            try:
                yield span
            except Exception as e:
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, f"{type(e).__name__}: {e}"))
                raise


_global_tracer: Optional[TracingClient] = None


def get_tracer() -> TracingClient:
    """Process-wide TracingClient, configured from the environment on first use."""
    global _global_tracer

    if _global_tracer is None:
        exporter = os.getenv("CLMM_TICKMAP_TRACING", "").strip().lower()
        _global_tracer = TracingClient(
            exporter_type=exporter,
            otlp_endpoint=os.getenv("OTLP_ENDPOINT"),
            enabled=exporter in EXPORTERS,
        )
    return _global_tracer


@contextmanager
def trace_rpc_call(method: str, endpoint: str, **attributes):
    """
    Span around one JSON-RPC request

    Example:
        with trace_rpc_call("getAccountInfo", url, address=address):
            response = session.post(url, json=payload)
    """
    attrs = {"rpc.system": "solana", "rpc.method": method, "rpc.endpoint": endpoint}
    attrs.update({f"rpc.{key}": value for key, value in attributes.items()})
    with get_tracer().start_span(f"rpc.{method}", attributes=attrs) as span:
        yield span
