"""
Sliced optimal-transport color transfer.

Each outer iteration samples a batch of random directions in RGB space, solves
the 1-D transport problem along each one by sorting, and moves every source
pixel by the batch-averaged displacement.
"""

from typing import Callable, Optional

import numpy as np

from .advection import accumulate_advection, apply_advection
from .coupling import parallel_sort_indices_by_key, rank_coupling
from .projection import project_colors, sample_direction
from .utils import NullReporter

MIN_STEP_FACTOR = 0.01
MAX_STEP_FACTOR = 10.0


def clamp_step_factor(value: float) -> float:
    value = float(value)
    if not np.isfinite(value):
        raise ValueError(f"step_factor must be finite, got {value}")
    return min(max(value, MIN_STEP_FACTOR), MAX_STEP_FACTOR)


def relax_step_factor(value: float) -> float:
    """Move the step factor geometrically toward 1.0."""
    return 0.9 * value + 0.1


class ColorTransfer:
    """
    Reshape the color distribution of a source image toward a target image.
    """

    def __init__(
        self,
        source: np.ndarray,
        target: np.ndarray,
        step_factor: float = 1.0,
        batch_size: int = 16,
        rng: Optional[np.random.Generator] = None,
        sorter: Callable[[np.ndarray], np.ndarray] = parallel_sort_indices_by_key
    ):
        """
        Initialize the transfer.

        Args:
            source: (H, W, 3) uint8 image to transform; a private copy is kept
            target: (H, W, 3) uint8 image whose colors are matched, same shape as source
            step_factor: Initial displacement scale, clamped to [0.01, 10.0]
            batch_size: Directions sampled per outer iteration
            rng: Random generator for direction sampling (fresh unseeded one if None)
            sorter: Callable returning the stable argsort of a projection vector
        """
        source = np.asarray(source)
        target = np.asarray(target)
        if source.ndim != 3 or source.shape[2] != 3:
            raise ValueError(f"Source must have shape (height, width, 3), got {source.shape}")
        if target.shape != source.shape:
            raise ValueError(f"Target shape {target.shape} does not match source shape {source.shape}")
        if batch_size < 1:
            raise ValueError(f"batch_size must be at least 1, got {batch_size}")

        self.image = np.array(source, dtype=np.uint8, order='C', copy=True)
        self.target = np.array(target, dtype=np.uint8, order='C', copy=True)

        self.pixels = self.image.reshape(-1, 3)
        self.target_pixels = self.target.reshape(-1, 3)
        self.n_pixels = self.pixels.shape[0]

        self.step_factor = clamp_step_factor(step_factor)
        self.batch_size = int(batch_size)
        self.rng = rng if rng is not None else np.random.default_rng()
        self.sorter = sorter

        self.advection_map = np.zeros((self.n_pixels, 3), dtype=np.float32)
        self.iteration = 0
        self.state = "idle"

    def step(self) -> float:
        """
        Run one outer iteration and return the magnitude of the mean displacement.
        """
        self.advection_map.fill(0.0)

        for _ in range(self.batch_size):
            direction = sample_direction(self.rng)

            source_proj = project_colors(self.pixels, direction)
            target_proj = project_colors(self.target_pixels, direction)
            sorted_source, sorted_target = rank_coupling(source_proj, target_proj, self.sorter)

            accumulate_advection(self.advection_map, direction, source_proj, target_proj,
                                 sorted_source, sorted_target, self.step_factor)

        self.advection_map /= self.batch_size

        mean_advection = 0.0
        if self.n_pixels > 0:
            mean_advection = float(np.linalg.norm(self.advection_map.mean(axis=0)))

        # All batch members are done reading the source at this point
        apply_advection(self.pixels, self.advection_map)

        self.step_factor = relax_step_factor(self.step_factor)
        self.iteration += 1
        return mean_advection

    def run(
        self,
        num_iters: int,
        reporter=None,
        on_iteration: Optional[Callable[[int, np.ndarray], None]] = None
    ) -> np.ndarray:
        """
        Run exactly num_iters outer iterations.

        Args:
            num_iters: Number of outer iterations (no early exit)
            reporter: Object with report(), advance() and finish() (see utils)
            on_iteration: Called as on_iteration(i, image) after each iteration

        Returns:
            The transformed (H, W, 3) uint8 image
        """
        if num_iters < 0:
            raise ValueError(f"num_iters must be non-negative, got {num_iters}")
        if reporter is None:
            reporter = NullReporter()

        self.state = "iterating"
        try:
            for i in range(num_iters):
                step_factor = self.step_factor
                mean_advection = self.step()
                reporter.report(i, mean_advection, step_factor)
                reporter.advance(1)
                if on_iteration is not None:
                    on_iteration(i, self.image)
        finally:
            reporter.finish()

        self.state = "done"
        return self.image
