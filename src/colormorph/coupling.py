"""
Rank coupling between two empirical 1-D distributions.

Sorting both projection vectors and pairing them rank by rank gives the
monotone rearrangement, which is the optimal transport plan on the real line
for the quadratic cost. Every sorter here breaks ties by original pixel index.
"""

from typing import Callable, Tuple

import numpy as np
import numba
from numba import jit, prange


def sort_indices_by_key(values: np.ndarray) -> np.ndarray:
    """Stable argsort, single threaded."""
    return np.argsort(values, kind='stable')


@jit(nopython=True, parallel=True)
def _parallel_argsort(values, n_chunks):
    n = values.shape[0]
    order = np.empty(n, dtype=np.int64)
    if n == 0:
        return order

    n_chunks = max(1, min(n_chunks, n))
    bounds = np.empty(n_chunks + 1, dtype=np.int64)
    for c in range(n_chunks + 1):
        bounds[c] = (c * n) // n_chunks

    # Sort each chunk independently
    for chunk in prange(n_chunks):
        lo = bounds[chunk]
        hi = bounds[chunk + 1]
        local = np.argsort(values[lo:hi], kind='mergesort')
        for offset in range(hi - lo):
            order[lo + offset] = local[offset] + lo

    # Merge neighbouring runs pairwise, left run wins ties
    buffer = np.empty(n, dtype=np.int64)
    width = 1
    while width < n_chunks:
        n_pairs = (n_chunks + 2 * width - 1) // (2 * width)
        for p in prange(n_pairs):
            left = p * 2 * width
            mid = min(left + width, n_chunks)
            right = min(left + 2 * width, n_chunks)
            start = bounds[left]
            middle = bounds[mid]
            stop = bounds[right]

            i = start
            j = middle
            k = start
            while i < middle and j < stop:
                if values[order[j]] < values[order[i]]:
                    buffer[k] = order[j]
                    j += 1
                else:
                    buffer[k] = order[i]
                    i += 1
                k += 1
            while i < middle:
                buffer[k] = order[i]
                i += 1
                k += 1
            while j < stop:
                buffer[k] = order[j]
                j += 1
                k += 1

        order[:] = buffer
        width *= 2

    return order


def parallel_sort_indices_by_key(values: np.ndarray) -> np.ndarray:
    """
    Chunked parallel merge sort over the numba thread pool.

    Returns the same permutation as sort_indices_by_key.
    """
    return _parallel_argsort(np.ascontiguousarray(values), numba.get_num_threads())


SORTERS = {
    'stable': sort_indices_by_key,
    'parallel': parallel_sort_indices_by_key,
}


def rank_coupling(
    source_projection: np.ndarray,
    target_projection: np.ndarray,
    sorter: Callable[[np.ndarray], np.ndarray] = sort_indices_by_key
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Couple source and target pixels along one direction.

    Returns:
        (sorted_source, sorted_target) where sorted_source[k] is paired with
        sorted_target[k].
    """
    if source_projection.shape != target_projection.shape:
        raise ValueError(
            f"Projection lengths differ: {source_projection.shape[0]} vs {target_projection.shape[0]}"
        )
    return sorter(source_projection), sorter(target_projection)
