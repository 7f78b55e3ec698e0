"""
Visualization orchestrator for disk-write benchmark results.

This module loads a sample log written by the benchmark and creates
summaries and plots from it.
"""

import os
import logging
from typing import Any, Dict, List, Optional

from visualizations.throughput_plots import ThroughputPlotter
from visualizations.throughput_utils import load_sample_log, summarize_run

logger = logging.getLogger(__name__)


class BenchmarkVisualizer:
    """Simple visualizer for benchmark sample logs."""

    def __init__(self, log_file: str, output_dir: Optional[str] = None):
        self.log_file = log_file
        self.output_dir = output_dir
        self.data = None

        if output_dir:
            # Ensure output directory exists
            os.makedirs(output_dir, exist_ok=True)

        # Load data
        self._load_data()

        if self.data is not None and output_dir:
            self.throughput_plotter = ThroughputPlotter(self.data, self.output_dir)
        else:
            self.throughput_plotter = None

    def _load_data(self):
        """Load benchmark samples from the CSV log."""
        try:
            self.data = load_sample_log(self.log_file)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load data: {e}")
            self.data = None

    def summarize(self, window: int = None) -> Optional[Dict[str, Any]]:
        """Summarize the loaded run, or None if nothing could be loaded."""
        if self.data is None:
            return None
        return summarize_run(self.data, window)

    def create_throughput_timeline(self, window: int = None):
        """Create throughput timeline plot."""
        if self.throughput_plotter is None:
            logger.warning("Throughput plotter not available")
            return None
        return self.throughput_plotter.create_throughput_timeline(window)

    def create_all_plots(self, window: int = None) -> List[str]:
        """Create all available plots and return their paths."""
        plots = []
        for plot in (self.create_throughput_timeline(window),):
            if plot:
                plots.append(plot)
        return plots
