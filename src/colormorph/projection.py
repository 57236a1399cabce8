import numpy as np
from numba import jit, prange


def sample_direction(rng: np.random.Generator) -> np.ndarray:
    """Draw a random unit vector in RGB space.

    Three independent standard-normal samples, normalized. A near-zero norm
    is not special-cased.
    """
    direction = rng.standard_normal(3).astype(np.float32)
    norm = np.sqrt(np.sum(direction * direction))
    direction /= norm
    return direction


@jit(nopython=True, parallel=True, fastmath=True)
def project_colors(pixels, direction):
    """Project every (R, G, B) pixel of an (N, 3) uint8 array onto direction."""
    n_pixels = pixels.shape[0]
    projections = np.empty(n_pixels, dtype=np.float32)

    for i in prange(n_pixels):
        projections[i] = (pixels[i, 0] * direction[0] +
                          pixels[i, 1] * direction[1] +
                          pixels[i, 2] * direction[2])

    return projections
