"""
Runtime and memory profiling helpers for benchmarking the filter.
"""
import time
import tracemalloc
from contextlib import contextmanager
from dataclasses import dataclass

import numpy as np


@dataclass
class ProfileResult:
    """Container for profiling results."""
    runtime_s: float = 0.0
    peak_memory_mb: float = 0.0


@contextmanager
def profile():
    """Context manager for measuring runtime and peak memory usage."""
    result = ProfileResult()
    tracemalloc.start()
    start = time.perf_counter()
    try:
        yield result
    finally:
        result.runtime_s = time.perf_counter() - start
        _, peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()
        result.peak_memory_mb = peak / (1024 * 1024)


def time_callable(fn, *args, n_repeats=5, **kwargs):
    """
    Time repeated calls of fn(*args, **kwargs).

    Parameters
    ----------
    fn : callable
        Function to time
    n_repeats : int
        Number of timed calls

    Returns
    -------
    dict
        {'min', 'median', 'mean', 'max'} runtimes in seconds and 'result'
        (the return value of the last call)
    """
    if n_repeats < 1:
        raise ValueError(f"n_repeats must be >= 1, got {n_repeats}")

    times = np.zeros(n_repeats)
    result = None
    for i in range(n_repeats):
        start = time.perf_counter()
        result = fn(*args, **kwargs)
        times[i] = time.perf_counter() - start

    return {
        'min': float(times.min()),
        'median': float(np.median(times)),
        'mean': float(times.mean()),
        'max': float(times.max()),
        'result': result,
    }
