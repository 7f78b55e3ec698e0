"""
Shared utilities for analysing a sample log: loading, moving averages and run summaries.
"""

import pandas as pd
import logging
from typing import Any, Dict, List, Sequence

from configuration import FINAL_ROW_MARKER, MOVING_AVERAGE_WINDOW, TIMESTAMP_FORMAT

logger = logging.getLogger(__name__)

LOG_COLUMNS = ['timestamp', 'elapsed_seconds', 'throughput_mibps', 'marker']


def load_sample_log(path: str) -> pd.DataFrame:
    """
    Load a sample log into a DataFrame.

    Periodic rows have no marker; the column is NaN for them. An 'is_final'
    boolean column is added.

    Args:
        path: CSV log written by the benchmark

    Returns:
        DataFrame with timestamp, elapsed_seconds, throughput_mibps, marker, is_final
    """
    data = pd.read_csv(path, header=None, names=LOG_COLUMNS, dtype={'marker': 'object'})
    data['timestamp'] = pd.to_datetime(data['timestamp'], format=TIMESTAMP_FORMAT)
    data['is_final'] = data['marker'] == FINAL_ROW_MARKER
    logger.info(f"Loaded {len(data)} rows from {path}")
    return data


def moving_average(values: Sequence[float], window: int = None) -> List[float]:
    """
    Simple trailing moving average.

    The first window-1 entries average over the samples seen so far, so the
    result has the same length as the input.

    Args:
        values: Throughput samples in arrival order
        window: Number of samples per window (default: from configuration)

    Returns:
        List of averaged values
    """
    if window is None:
        window = MOVING_AVERAGE_WINDOW
    if window <= 0:
        raise ValueError(f"Window must be positive, got {window}")
    if len(values) == 0:
        return []
    series = pd.Series(values, dtype='float64')
    return series.rolling(window=window, min_periods=1).mean().tolist()


def summarize_run(data: pd.DataFrame, window: int = None) -> Dict[str, Any]:
    """
    Summarize a loaded sample log.

    Args:
        data: DataFrame from load_sample_log()
        window: Moving-average window in samples

    Returns:
        Dictionary with sample count, duration, mean and last moving-average
        throughput of the periodic rows, and the final lifetime throughput
        (None when the run has no final row)
    """
    periodic = data[~data['is_final']]
    final = data[data['is_final']]

    if len(periodic) > 0:
        throughput = periodic['throughput_mibps'].tolist()
        mean_throughput = float(periodic['throughput_mibps'].mean())
        last_moving_average = moving_average(throughput, window)[-1]
    else:
        mean_throughput = 0.0
        last_moving_average = 0.0

    duration = float(data['elapsed_seconds'].max()) if len(data) > 0 else 0.0

    return {
        'samples': len(periodic),
        'duration_seconds': duration,
        'mean_throughput_mibps': mean_throughput,
        'moving_average_mibps': last_moving_average,
        'final_throughput_mibps': float(final['throughput_mibps'].iloc[-1]) if len(final) > 0 else None,
        'completed': len(final) > 0,
    }
