from .color_transfer import ColorTransfer, clamp_step_factor, relax_step_factor
from .coupling import SORTERS, parallel_sort_indices_by_key, rank_coupling, sort_indices_by_key
from .image_io import ColorMorphError, ImageLoadError, ImageSaveError, load_image, load_image_pair, resize_image, save_image

__version__ = '0.1.0'
