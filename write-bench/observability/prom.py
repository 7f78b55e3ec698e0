"""
Simple Prometheus metrics exporter for the disk-write benchmark.
"""

import logging
from prometheus_client import CollectorRegistry, Counter, Gauge, start_http_server

logger = logging.getLogger(__name__)


class SimplePrometheusExporter:
    """Simple Prometheus metrics exporter.

    Each exporter owns its registry so several instances can coexist in one
    process.
    """

    def __init__(self, port: int = 9100):
        self.port = port
        self.server_started = False
        self.registry = CollectorRegistry()

        # Define metrics
        self.writes_total = Counter('write_bench_writes_total', 'Total write calls',
                                    registry=self.registry)
        self.short_writes_total = Counter('write_bench_short_writes_total',
                                          'Writes that accepted fewer bytes than requested',
                                          registry=self.registry)
        self.bytes_written = Counter('write_bench_bytes_written_total', 'Total bytes written',
                                     registry=self.registry)
        self.throughput = Gauge('write_bench_throughput_mibps',
                                'Throughput of the last sampling interval in MiB/s',
                                registry=self.registry)

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def record_write(self, written: int, requested: int):
        """Record one write call."""
        self.writes_total.inc()
        self.bytes_written.inc(written)
        if written < requested:
            self.short_writes_total.inc()

    def update_throughput(self, throughput_mibps: float):
        """Update throughput metric."""
        self.throughput.set(throughput_mibps)
