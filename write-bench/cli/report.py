"""
Analysis CLI for sample logs produced by the disk-write benchmark.
"""

import os
import sys
import logging
import argparse

# Ensure project root is in path (for running as script)
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from configuration import DEFAULT_PLOTS_DIR, MOVING_AVERAGE_WINDOW, LOG_FORMAT, LOG_LEVEL

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
logger = logging.getLogger(__name__)


class SimpleReportCLI:
    """Simple CLI interface for inspecting benchmark sample logs."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            prog='write-bench-report',
            description='Disk-write benchmark log analysis',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Print a summary of a run
  write-bench-report summarize 2026-10-17_12-00-00.csv

  # Plot the throughput timeline with a 20-sample moving average
  write-bench-report plot 2026-10-17_12-00-00.csv --output-dir plots --window 20
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Summarize command
        summarize_parser = subparsers.add_parser('summarize', help='Print a run summary')
        summarize_parser.add_argument('log_file', help='Sample log (CSV) to read')
        summarize_parser.add_argument('--window', type=int, default=MOVING_AVERAGE_WINDOW,
                                      help=f'Moving-average window in samples (default: {MOVING_AVERAGE_WINDOW})')

        # Plot command
        plot_parser = subparsers.add_parser('plot', help='Plot the throughput timeline')
        plot_parser.add_argument('log_file', help='Sample log (CSV) to read')
        plot_parser.add_argument('--output-dir', type=str, default=DEFAULT_PLOTS_DIR,
                                 help=f'Output directory for generated plots (default: {DEFAULT_PLOTS_DIR})')
        plot_parser.add_argument('--window', type=int, default=MOVING_AVERAGE_WINDOW,
                                 help=f'Moving-average window in samples (default: {MOVING_AVERAGE_WINDOW})')

        return parser

    def run_summarize(self, args):
        """Print a summary of one run."""
        from cli.visualiser import BenchmarkVisualizer

        if not os.path.exists(args.log_file):
            logger.error(f"Log file not found: {args.log_file}")
            return 1

        summary = BenchmarkVisualizer(args.log_file).summarize(args.window)
        if summary is None:
            return 1

        print(f"Samples: {summary['samples']}")
        print(f"Duration: {summary['duration_seconds']:.1f} s")
        print(f"Mean throughput: {summary['mean_throughput_mibps']:f} MByte/s")
        print(f"Moving average (last {args.window}): {summary['moving_average_mibps']:f} MByte/s")
        if summary['completed']:
            print(f"Total: {summary['final_throughput_mibps']:f} MByte/s")
        else:
            logger.warning("Run has no final row; it was probably aborted")
        return 0

    def run_plot(self, args):
        """Plot the throughput timeline of one run."""
        from cli.visualiser import BenchmarkVisualizer

        logger.info("=== Throughput Plots ===")

        if not os.path.exists(args.log_file):
            logger.error(f"Log file not found: {args.log_file}")
            return 1

        visualizer = BenchmarkVisualizer(args.log_file, args.output_dir)
        plots = visualizer.create_all_plots(args.window)

        if plots:
            logger.info(f"Successfully created {len(plots)} plots in {args.output_dir}")
            for plot in plots:
                logger.info(f"  - {plot}")
            return 0
        else:
            logger.error("No plots were created")
            return 1

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        if parsed_args.window <= 0:
            logger.error(f"Window must be positive, got {parsed_args.window}")
            return 1

        if parsed_args.command == 'summarize':
            return self.run_summarize(parsed_args)
        elif parsed_args.command == 'plot':
            return self.run_plot(parsed_args)
        else:
            logger.error(f"Unknown command: {parsed_args.command}")
            return 1


def main(args=None):
    """Main entry point."""
    cli = SimpleReportCLI()
    return cli.run(args)


if __name__ == '__main__':
    sys.exit(main())
