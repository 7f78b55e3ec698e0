"""
Base classes for plot visualization.
"""

import pandas as pd
import logging

logger = logging.getLogger(__name__)


class BasePlotter:
    """Base class for all plotters with common functionality."""

    def __init__(self, data: pd.DataFrame, output_dir: str):
        self.data = data
        self.output_dir = output_dir

    def has_data(self) -> bool:
        return self.data is not None and len(self.data) > 0

    def periodic_samples(self):
        """Filter data to the periodic rows, dropping the final summary row."""
        if not self.has_data():
            return None
        return self.data[~self.data['is_final']]

    def final_sample(self):
        """Get the final summary row, or None if the run was not finished."""
        if not self.has_data():
            return None
        final = self.data[self.data['is_final']]
        if len(final) == 0:
            return None
        return final.iloc[-1]
