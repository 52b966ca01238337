import logging
import operator
import time
from multiprocessing import Pool
from typing import NamedTuple

import numpy as np

logger = logging.getLogger(__name__)

# Reference value of pi, 25 significant digits
PI25DT = 3.141592653589793238462643
TOTAL_INTERVALS = 10_000_000

# Samples evaluated per numpy step inside a worker
BLOCK_SIZE = 1 << 20


class Result(NamedTuple):
    worker_count: int
    pi: float
    error: float
    elapsed: float


def _as_count(name, value):
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer, got {value!r}")
    try:
        return operator.index(value)
    except TypeError:
        raise TypeError(f"{name} must be an integer, got {value!r}") from None


def _check_worker_count(worker_count, total_intervals):
    worker_count = _as_count("worker_count", worker_count)
    total_intervals = _as_count("total_intervals", total_intervals)
    if total_intervals <= 0:
        raise ValueError(f"total_intervals must be positive, got {total_intervals}")
    if worker_count <= 0:
        raise ValueError(f"worker_count must be at least 1, got {worker_count}")
    if worker_count > total_intervals:
        raise ValueError(
            f"worker_count ({worker_count}) exceeds the number of intervals ({total_intervals})"
        )
    return worker_count, total_intervals


def chunk_bounds(worker_count, total_intervals=TOTAL_INTERVALS, overlap=False):
    """Split ``total_intervals`` into one contiguous chunk per worker.

    Worker ``k`` (1-based) gets ``(chunk_size * (k - 1), chunk_size * k)``.
    The last chunk absorbs the division remainder unless ``overlap`` is set,
    in which case the bounds are exactly those of the closed-range scheme.
    """
    worker_count, total_intervals = _check_worker_count(worker_count, total_intervals)
    chunk_size = total_intervals // worker_count

    bounds = []
    for k in range(1, worker_count + 1):
        end = chunk_size * k
        start = end - chunk_size
        bounds.append((start, end))

    if not overlap:
        start, _ = bounds[-1]
        bounds[-1] = (start, total_intervals)
    return bounds


def midpoint_sum(start, end, dx, overlap=False):
    """Sum of 4 / (1 + x^2) over the midpoints of intervals ``[start, end)``.

    With ``overlap`` the samples are taken at ``dx * (j - 0.5)`` for every
    ``j`` in the closed range ``[start, end]``, so neighbouring chunks both
    sample their shared boundary.
    """
    if overlap:
        first, stop, offset = start, end + 1, -0.5
    else:
        first, stop, offset = start, end, 0.5

    inner_sum = 0.0
    for lo in range(first, stop, BLOCK_SIZE):
        hi = min(lo + BLOCK_SIZE, stop)
        x = dx * (np.arange(lo, hi, dtype=np.float64) + offset)
        inner_sum += float(np.sum(4.0 / (1.0 + x * x)))
    return inner_sum


def midpoint_worker(args):
    start, end, dx, overlap = args
    return midpoint_sum(start, end, dx, overlap)


def estimate_pi(worker_count, total_intervals=TOTAL_INTERVALS, overlap=False):
    worker_count, total_intervals = _check_worker_count(worker_count, total_intervals)
    bounds = chunk_bounds(worker_count, total_intervals, overlap)
    dx = 1.0 / total_intervals

    start_time = time.perf_counter()

    tasks = [(start, end, dx, overlap) for start, end in bounds]
    with Pool(processes=worker_count) as pool:
        # map keeps worker order, so the reduction order is fixed
        partial_sums = pool.map(midpoint_worker, tasks)

    pi_estimate = dx * sum(partial_sums)
    elapsed = time.perf_counter() - start_time

    logger.debug(
        "workers=%d intervals=%d pi=%.17g elapsed=%.6fs",
        worker_count, total_intervals, pi_estimate, elapsed,
    )
    return Result(worker_count, pi_estimate, abs(PI25DT - pi_estimate), elapsed)
