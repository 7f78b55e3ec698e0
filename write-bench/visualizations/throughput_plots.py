"""
Throughput visualization plots.
"""

import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt
import logging
import os

from configuration import PLOT_DPI
from .base import BasePlotter
from .throughput_utils import moving_average

logger = logging.getLogger(__name__)


class ThroughputPlotter(BasePlotter):
    """Plotter for throughput-related visualizations."""

    def create_throughput_timeline(self, window: int = None):
        """Create throughput timeline plot with a moving average and the lifetime average."""
        samples = self.periodic_samples()
        if samples is None or len(samples) == 0:
            logger.warning("No data available for throughput plot")
            return None

        try:
            plt.figure(figsize=(15, 8))

            elapsed = samples['elapsed_seconds'].tolist()
            throughput = samples['throughput_mibps'].tolist()

            plt.plot(elapsed, throughput, marker='.', linewidth=1, markersize=3,
                     alpha=0.6, label='Per interval')
            plt.plot(elapsed, moving_average(throughput, window), linewidth=2,
                     label='Moving average')

            final = self.final_sample()
            if final is not None:
                plt.axhline(final['throughput_mibps'], color='red', linestyle='--',
                            label=f"Total: {final['throughput_mibps']:.1f} MiB/s")

            plt.title('Write Throughput Timeline', fontsize=14)
            plt.xlabel('Elapsed time (s)', fontsize=12)
            plt.ylabel('Throughput (MiB/s)', fontsize=12)
            plt.grid(True, alpha=0.3)
            plt.legend()
            plt.tight_layout()

            # Save plot
            output_file = os.path.join(self.output_dir, 'throughput_timeline.png')
            plt.savefig(output_file, dpi=PLOT_DPI, bbox_inches='tight')
            plt.close()

            logger.info(f"Created throughput timeline plot: {output_file}")
            return output_file

        except (OSError, ValueError) as e:
            plt.close()
            logger.error(f"Failed to create throughput plot: {e}")
            return None
