import time
from typing import Dict, Sequence

import numpy as np


def timeit(f, *args, **kwargs):
    start_time = time.perf_counter()
    result = f(*args, **kwargs)
    end_time = time.perf_counter()
    return result, end_time - start_time


def summarize_times(seconds: Sequence[float]) -> Dict[str, float]:
    """Total, mean, median and max of a list of wall-clock times."""
    if len(seconds) == 0:
        return {'total': 0.0, 'mean': 0.0, 'median': 0.0, 'max': 0.0}
    arr = np.asarray(seconds, dtype=float)
    return {
        'total': float(np.sum(arr)),
        'mean': float(np.mean(arr)),
        'median': float(np.median(arr)),
        'max': float(np.max(arr)),
    }
