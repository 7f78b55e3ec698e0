"""
Tests for the benchmark command line and the orchestrator.
"""

import asyncio
import os
import sys
import tempfile
import time
import unittest
from unittest.mock import patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from cli.benchmark import BenchmarkRunner, main, parse_config
from common.errors import ConfigurationError
from configuration import BenchmarkConfig
from persistence.csv_log import read_records


class TestParseConfig(unittest.TestCase):
    """Test command-line parsing."""

    def test_defaults(self):
        config = parse_config(["out.bin"])

        self.assertEqual(config.output_path, "out.bin")
        self.assertEqual(config.chunk_size, 65536)
        self.assertEqual(config.interval_ms, 250)
        self.assertTrue(config.sync)
        self.assertEqual(config.prometheus_port, 0)

    def test_options(self):
        config = parse_config(["--chunksize", "1024", "--interval", "100", "--no-sync", "dev"])

        self.assertEqual(config.chunk_size, 1024)
        self.assertEqual(config.interval_ms, 100)
        self.assertFalse(config.sync)
        self.assertEqual(config.output_path, "dev")

    def test_options_after_path(self):
        config = parse_config(["out.bin", "--chunksize=4096", "--sync"])
        self.assertEqual(config.chunk_size, 4096)
        self.assertTrue(config.sync)

    def test_sync_with_value(self):
        self.assertFalse(parse_config(["--sync=false", "out.bin"]).sync)
        self.assertTrue(parse_config(["--sync=true", "out.bin"]).sync)
        with self.assertRaises(ConfigurationError):
            parse_config(["--sync=maybe", "out.bin"])

    def test_wrong_number_of_outputs(self):
        with self.assertRaises(ConfigurationError):
            parse_config([])
        with self.assertRaises(ConfigurationError):
            parse_config(["a.bin", "b.bin"])

    def test_invalid_values(self):
        with self.assertRaises(ConfigurationError):
            parse_config(["--chunksize", "abc", "out.bin"])
        with self.assertRaises(ConfigurationError):
            parse_config(["--chunksize", "0", "out.bin"])
        with self.assertRaises(ConfigurationError):
            parse_config(["--interval", "0", "out.bin"])


class TestMain(unittest.TestCase):
    """Test exit codes of the benchmark entry point."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.cwd = os.getcwd()
        os.chdir(self.tmpdir.name)

    def tearDown(self):
        os.chdir(self.cwd)
        self.tmpdir.cleanup()

    def test_no_output_file(self):
        with self.assertLogs("cli.benchmark", level="ERROR"):
            self.assertEqual(main([]), 1)
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_two_output_files(self):
        with self.assertLogs("cli.benchmark", level="ERROR"):
            self.assertEqual(main(["a.bin", "b.bin"]), 1)
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_unwritable_output(self):
        path = os.path.join(self.tmpdir.name, "missing", "out.bin")
        self.assertEqual(main([path]), 1)
        self.assertEqual(os.listdir(self.tmpdir.name), [])

    def test_log_creation_failure(self):
        log_dir = os.path.join(self.tmpdir.name, "missing")
        self.assertEqual(main(["out.bin", "--log-dir", log_dir]), 1)

    @patch("cli.benchmark.uvloop.run")
    def test_runs_benchmark(self, mock_run):
        def fake_run(coro):
            coro.close()
            return 0

        mock_run.side_effect = fake_run

        self.assertEqual(main(["--chunksize", "512", "out.bin"]), 0)
        mock_run.assert_called_once()
        self.assertTrue(os.path.exists("out.bin"))

    @patch("cli.benchmark.uvloop.run")
    def test_interrupt_before_run_starts(self, mock_run):
        def interrupted_run(coro):
            coro.close()
            raise KeyboardInterrupt

        mock_run.side_effect = interrupted_run
        original_close = BenchmarkRunner.close

        with patch.object(BenchmarkRunner, "close", autospec=True,
                          side_effect=original_close) as mock_close:
            with self.assertLogs("cli.benchmark", level="ERROR"):
                self.assertEqual(main(["out.bin"]), 1)

        mock_close.assert_called_once()

    def test_interrupt_while_opening_log(self):
        fd = os.open("out.bin", os.O_WRONLY | os.O_CREAT)

        with patch("cli.benchmark.open_output", return_value=fd), \
                patch("cli.benchmark.CsvSampleLog", side_effect=KeyboardInterrupt):
            with self.assertLogs("cli.benchmark", level="ERROR"):
                self.assertEqual(main(["out.bin"]), 1)

        # The output descriptor was released
        with self.assertRaises(OSError):
            os.fstat(fd)


class TestBenchmarkRunner(unittest.TestCase):
    """Test the orchestrator in-process."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.output = os.path.join(self.tmpdir.name, "out.bin")

    def tearDown(self):
        self.tmpdir.cleanup()

    def _config(self, **kwargs):
        params = dict(output_path=self.output, chunk_size=1024, interval_ms=50,
                      sync=False, log_dir=self.tmpdir.name)
        params.update(kwargs)
        return BenchmarkConfig(**params)

    def _run_for(self, runner, seconds):
        async def scenario():
            stop_event = asyncio.Event()
            asyncio.get_running_loop().call_later(seconds, stop_event.set)
            return await runner.run_benchmark(stop_event)

        return asyncio.run(scenario())

    def test_orderly_stop_writes_final_row(self):
        runner = BenchmarkRunner(self._config(output_path=os.devnull))
        log_path = runner.sample_log.path

        status = self._run_for(runner, 0.3)

        self.assertEqual(status, 0)
        records = read_records(log_path)
        periodic = [r for r in records if not r.is_final]
        self.assertGreaterEqual(len(periodic), 3)
        self.assertEqual([r.is_final for r in records].count(True), 1)
        self.assertTrue(records[-1].is_final)
        for earlier, later in zip(periodic, periodic[1:]):
            self.assertLess(earlier.elapsed_seconds, later.elapsed_seconds)
        self.assertTrue(all(r.throughput_mibps >= 0 for r in records))

    def test_counters_match_output_size(self):
        """After an orderly stop nothing is in flight, so the file size equals lifetime bytes."""
        runner = BenchmarkRunner(self._config(chunk_size=4096))

        self.assertEqual(self._run_for(runner, 0.15), 0)

        self.assertEqual(os.path.getsize(self.output), runner.totals.lifetime_bytes)
        self.assertEqual(runner.totals.lifetime_bytes % 4096, 0)
        self.assertIsNone(runner.fd)

    def test_appends_to_existing_output(self):
        with open(self.output, "wb") as f:
            f.write(b"x" * 100)

        runner = BenchmarkRunner(self._config())
        self.assertEqual(self._run_for(runner, 0.1), 0)

        self.assertEqual(os.path.getsize(self.output), 100 + runner.totals.lifetime_bytes)

    def test_write_failure_exits_without_final_row(self):
        runner = BenchmarkRunner(self._config())
        log_path = runner.sample_log.path

        # Swap in a descriptor that cannot be written to
        os.close(runner.fd)
        runner.fd = os.open(self.output, os.O_RDONLY)

        with self.assertLogs("cli.benchmark", level="ERROR"):
            status = self._run_for(runner, 5.0)

        self.assertEqual(status, 1)
        self.assertFalse(any(r.is_final for r in read_records(log_path)))

    def test_slow_log_sync_does_not_stall_event_loop(self):
        runner = BenchmarkRunner(self._config(output_path=os.devnull))
        log_path = runner.sample_log.path
        real_fsync = os.fsync

        def slow_fsync(fd):
            time.sleep(0.3)
            real_fsync(fd)

        async def scenario():
            loop = asyncio.get_running_loop()
            stop_event = asyncio.Event()
            loop.call_later(0.5, stop_event.set)
            gaps = []

            async def heartbeat():
                last = loop.time()
                while not stop_event.is_set():
                    await asyncio.sleep(0.01)
                    now = loop.time()
                    gaps.append(now - last)
                    last = now

            beat = asyncio.create_task(heartbeat())
            status = await runner.run_benchmark(stop_event)
            await beat
            return status, gaps

        # Output sync is off, so only the sample log calls fsync
        with patch("persistence.csv_log.os.fsync", side_effect=slow_fsync):
            status, gaps = asyncio.run(scenario())

        self.assertEqual(status, 0)
        self.assertLess(max(gaps), 0.15)
        records = read_records(log_path)
        self.assertGreaterEqual(len(records), 2)
        self.assertEqual([r.is_final for r in records].count(True), 1)
        self.assertTrue(records[-1].is_final)

    def test_unallocatable_buffer_exits_with_error(self):
        runner = BenchmarkRunner(self._config())
        log_path = runner.sample_log.path

        with patch("cli.benchmark.Writer", side_effect=MemoryError):
            with self.assertLogs("cli.benchmark", level="ERROR"):
                status = self._run_for(runner, 0.1)

        self.assertEqual(status, 1)
        self.assertIsNone(runner.fd)
        self.assertEqual(read_records(log_path), [])


if __name__ == '__main__':
    unittest.main()
