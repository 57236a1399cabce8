from numba import jit, prange


@jit(nopython=True, parallel=True, fastmath=True)
def accumulate_advection(advection_map, direction, source_projection, target_projection,
                         sorted_source, sorted_target, step_factor):
    """Add one direction's transport displacement to the advection map in place.

    For each rank k the source pixel sorted_source[k] is pushed along direction
    by step_factor times the projected gap to its coupled target pixel. No
    averaging happens here.
    """
    n_pixels = sorted_source.shape[0]

    # sorted_source is a permutation, so every rank writes a distinct row
    for k in prange(n_pixels):
        src_idx = sorted_source[k]
        tgt_idx = sorted_target[k]
        delta = step_factor * (target_projection[tgt_idx] - source_projection[src_idx])
        for c in range(3):
            advection_map[src_idx, c] += delta * direction[c]


@jit(nopython=True, parallel=True)
def apply_advection(pixels, advection_map):
    """Move (N, 3) uint8 pixels by the averaged advection map, clamped to [0, 255].

    Displacements are truncated toward zero before being added.
    """
    n_pixels = pixels.shape[0]

    for i in prange(n_pixels):
        for c in range(3):
            value = int(pixels[i, c]) + int(advection_map[i, c])
            if value < 0:
                value = 0
            elif value > 255:
                value = 255
            pixels[i, c] = value
