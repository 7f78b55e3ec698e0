"""
Disk-write throughput benchmark: write fixed chunks until interrupted, sampling throughput.
"""

import asyncio
import os
import sys
import signal
import logging
import argparse
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import List, Optional

# Required: Use uvloop for better performance
import uvloop

# Ensure project root is in path (for running as script)
# When run as module (python -m cli.benchmark), this is not needed
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from configuration import (
    BenchmarkConfig,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_INTERVAL_MS,
    DEFAULT_SYNC,
    DEFAULT_LOG_DIR,
    DEFAULT_PROMETHEUS_PORT,
    LOG_FORMAT,
    LOG_LEVEL,
)
from common.errors import ConfigurationError, WriteError
from common.running_totals import RunningTotals
from algorithms.writer import Writer, open_output
from algorithms.sampler import Sampler
from algorithms.reporter import Reporter
from persistence.csv_log import CsvSampleLog

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class BenchmarkRunner:
    """Runs the write loop and the sampler until a shutdown signal arrives."""

    def __init__(self, config: BenchmarkConfig):
        self.config = config
        self.fd: Optional[int] = None
        self.sample_log: Optional[CsvSampleLog] = None
        self.metrics = None
        self.totals: Optional[RunningTotals] = None
        self.writer: Optional[Writer] = None
        self.sampler: Optional[Sampler] = None
        self.reporter: Optional[Reporter] = None

        # Initialize components
        try:
            self._initialize_components()
        except KeyboardInterrupt:
            self.close()
            raise

        logger.info(
            f"Initialized benchmark runner: {config.output_path}, "
            f"{config.chunk_size} byte chunks, {config.interval_ms} ms interval"
        )

    def _initialize_components(self):
        """Open the output target and the sample log."""
        try:
            self.fd = open_output(self.config.output_path)
        except OSError as e:
            logger.error(f"Failed to open output {self.config.output_path}: {e}")
            raise

        try:
            self.sample_log = CsvSampleLog(self.config.log_dir, started_at=datetime.now())
        except OSError as e:
            logger.error(f"Failed to create sample log in {self.config.log_dir}: {e}")
            os.close(self.fd)
            self.fd = None
            raise

        if self.config.prometheus_port:
            from observability.prom import SimplePrometheusExporter

            self.metrics = SimplePrometheusExporter(self.config.prometheus_port)
            self.metrics.start_server()

    def _build_loops(self, log_executor=None):
        """Create the counters and the loops that share them; starts the run clock."""
        self.totals = RunningTotals()
        self.writer = Writer(
            self.fd,
            self.totals,
            self.config.chunk_size,
            sync=self.config.sync,
            path=self.config.output_path,
            metrics=self.metrics,
        )
        self.sampler = Sampler(
            self.totals,
            self.sample_log,
            self.config.interval_seconds,
            metrics=self.metrics,
            log_executor=log_executor,
        )
        self.reporter = Reporter(self.totals, self.sample_log)

    def _install_signal_handlers(self, loop, stop_event: asyncio.Event) -> List[int]:
        installed = []
        for sig in SHUTDOWN_SIGNALS:
            try:
                loop.add_signal_handler(sig, stop_event.set)
                installed.append(sig)
            except (NotImplementedError, RuntimeError) as e:
                logger.warning(f"Cannot handle {signal.Signals(sig).name}: {e}")
        return installed

    async def run_benchmark(self, stop_event: Optional[asyncio.Event] = None) -> int:
        """Execute the benchmark until stop_event is set or a shutdown signal arrives.

        Args:
            stop_event: Event that ends the run (a fresh one is created if omitted)

        Returns:
            Process exit status: 0 after an orderly stop, 1 if a loop failed
        """
        loop = asyncio.get_running_loop()
        if stop_event is None:
            stop_event = asyncio.Event()

        # Sample log rows are appended in order on their own thread
        log_executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="sample-log")
        try:
            self._build_loops(log_executor)
        except MemoryError:
            logger.error(f"Cannot allocate a {self.config.chunk_size} byte write buffer")
            log_executor.shutdown(wait=False)
            self.close()
            return 1

        installed = self._install_signal_handlers(loop, stop_event)
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="writer")

        writer_future = loop.run_in_executor(executor, self.writer.run)
        sampler_task = asyncio.create_task(self.sampler.run(stop_event))
        stop_task = asyncio.create_task(stop_event.wait())
        logger.info("Starting benchmark, send SIGINT or SIGTERM to stop")

        try:
            done, _ = await asyncio.wait(
                {writer_future, sampler_task, stop_task},
                return_when=asyncio.FIRST_COMPLETED,
            )
            failed = stop_task not in done

            # Stop both loops and let them finish their current iteration
            stop_event.set()
            self.writer.stop()
            results = await asyncio.gather(writer_future, sampler_task, return_exceptions=True)

            errors = [r for r in results if isinstance(r, BaseException)]
            for error in errors:
                if isinstance(error, WriteError):
                    logger.error(f"Benchmark aborted: {error}")
                else:
                    logger.error(f"Benchmark aborted: {type(error).__name__}: {error}")
            if failed or errors:
                return 1

            logger.info("Shutdown requested, writing final report")
            await loop.run_in_executor(log_executor, self.reporter.report)
            return 0
        finally:
            stop_task.cancel()
            for sig in installed:
                loop.remove_signal_handler(sig)
            executor.shutdown(wait=False)
            # The log must be idle before it is closed
            log_executor.shutdown(wait=True)
            self.close()

    def close(self):
        """Release the output descriptor and the sample log."""
        if self.fd is not None:
            os.close(self.fd)
            self.fd = None
        if self.sample_log is not None:
            self.sample_log.close()


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "t", "true", "yes", "on"):
        return True
    if lowered in ("0", "f", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean value for --sync: {value!r}")


def _normalize_flags(argv: List[str]) -> List[str]:
    """Translate --sync=<bool> into --sync / --no-sync."""
    normalized = []
    for arg in argv:
        if arg.startswith("--sync="):
            arg = "--sync" if _parse_bool(arg.split("=", 1)[1]) else "--no-sync"
        normalized.append(arg)
    return normalized


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that reports usage errors as ConfigurationError."""

    def error(self, message):
        raise ConfigurationError(message)


def create_parser() -> argparse.ArgumentParser:
    """Create the benchmark argument parser."""
    parser = _ArgumentParser(
        prog="write-bench",
        description="Disk-write throughput benchmark",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write 64 KiB chunks with fsync, sampling every 250 ms
  write-bench /mnt/scratch/bench.bin

  # 1 MiB chunks without fsync, sampling every second
  write-bench --chunksize 1048576 --interval 1000 --no-sync /dev/sdX
        """,
    )
    parser.add_argument("outfile", nargs="*", help="Output file or device (exactly one)")
    parser.add_argument("--chunksize", type=int, default=DEFAULT_CHUNK_SIZE,
                        help=f"Bytes per write (default: {DEFAULT_CHUNK_SIZE})")
    parser.add_argument("--interval", type=int, default=DEFAULT_INTERVAL_MS,
                        help=f"Sampling interval in ms (default: {DEFAULT_INTERVAL_MS})")
    parser.add_argument("--sync", action=argparse.BooleanOptionalAction, default=DEFAULT_SYNC,
                        help="Sync after every write (default: %(default)s)")
    parser.add_argument("--log-dir", default=DEFAULT_LOG_DIR,
                        help=f"Directory for the sample log (default: {DEFAULT_LOG_DIR})")
    parser.add_argument("--prometheus-port", type=int, default=DEFAULT_PROMETHEUS_PORT,
                        help="Expose Prometheus metrics on this port (default: disabled)")
    return parser


def parse_config(argv: Optional[List[str]] = None) -> BenchmarkConfig:
    """Build the run configuration from command-line arguments.

    Raises:
        ConfigurationError: On a wrong number of output files or invalid values
    """
    if argv is None:
        argv = sys.argv[1:]

    args = create_parser().parse_args(_normalize_flags(list(argv)))

    if len(args.outfile) != 1:
        raise ConfigurationError("Exactly one output file required")

    return BenchmarkConfig(
        output_path=args.outfile[0],
        chunk_size=args.chunksize,
        interval_ms=args.interval,
        sync=args.sync,
        log_dir=args.log_dir,
        prometheus_port=args.prometheus_port,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the benchmark runner."""
    try:
        config = parse_config(argv)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    runner = None
    try:
        runner = BenchmarkRunner(config)
        return uvloop.run(runner.run_benchmark())
    except OSError as e:
        logger.error(f"Error running benchmark: {e}")
        return 1
    except KeyboardInterrupt:
        # Signal handlers are only installed once the run has started
        logger.error("Interrupted before the benchmark started")
        if runner is not None:
            runner.close()
        return 1


if __name__ == "__main__":
    sys.exit(main())
