"""Selection of analysis-eligible pixels from an RGBA frame."""

import numpy as np

from .color_space import rgb_to_hsv_batch


# Sampling strides in pixels over the RGBA buffer
LIVE_PIXEL_STRIDE = 3
THEME_PIXEL_STRIDE = 4
THEME_MIN_ALPHA = 200


def filter_pixels(rgba: np.ndarray, min_saturation: float, min_value: float = 0.08,
                  include_neutrals: bool = False, stride: int = LIVE_PIXEL_STRIDE) -> np.ndarray:
    """Return the (N, 3) RGB samples that pass the saturation/brightness gate.

    Every ``stride``-th pixel of the row-major buffer is considered. A pixel is
    kept when its HSV value reaches ``min_value`` and either its saturation
    reaches ``min_saturation`` or neutrals are included. An empty result means
    the frame has nothing to analyse.
    """
    rgb = rgba.reshape(-1, rgba.shape[-1])[::stride, :3]

    hsv = rgb_to_hsv_batch(rgb)
    keep = hsv[:, 2] >= min_value
    if not include_neutrals:
        keep &= hsv[:, 1] >= min_saturation

    return rgb[keep].astype(np.float64)


def opaque_pixels(rgba: np.ndarray, stride: int = THEME_PIXEL_STRIDE,
                  min_alpha: int = THEME_MIN_ALPHA) -> np.ndarray:
    """Sample (N, 3) RGB rows of sufficiently opaque pixels, with no color gate."""
    flat = rgba.reshape(-1, rgba.shape[-1])[::stride]
    if flat.shape[1] < 4:
        return flat[:, :3].astype(np.float64)
    return flat[flat[:, 3] >= min_alpha, :3].astype(np.float64)
