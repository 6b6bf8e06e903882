"""
Color space conversions used by the analysis and palette modules.
Covers sRGB -> HSV for pixel filtering and sRGB -> OKLab/OKLCH for display.
"""

import numpy as np
from typing import Sequence, Tuple


# Rec. 709 luma coefficients
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722])


def rgb_to_hsv_batch(rgb: np.ndarray) -> np.ndarray:
    """Convert 8-bit RGB rows of shape (..., 3) to HSV with all channels in [0, 1]."""
    rgb = np.asarray(rgb, dtype=np.float64) / 255.0

    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    max_val = np.maximum(np.maximum(r, g), b)
    min_val = np.minimum(np.minimum(r, g), b)
    delta = max_val - min_val

    # Value
    v = max_val

    # Saturation
    s = np.zeros_like(delta)
    mask = max_val > 0
    s[mask] = delta[mask] / max_val[mask]

    # Hue
    h = np.zeros_like(delta)
    mask_r = (max_val == r) & (delta != 0)
    mask_g = (max_val == g) & (delta != 0) & ~mask_r
    mask_b = (max_val == b) & (delta != 0) & ~mask_r & ~mask_g

    h[mask_r] = ((g[mask_r] - b[mask_r]) / delta[mask_r]) % 6
    h[mask_g] = (b[mask_g] - r[mask_g]) / delta[mask_g] + 2
    h[mask_b] = (r[mask_b] - g[mask_b]) / delta[mask_b] + 4
    h = h / 6.0

    return np.stack([h, s, v], axis=-1)


def hsv_of(rgb: Sequence[float]) -> Tuple[float, float, float]:
    """HSV of a single RGB triple."""
    h, s, v = rgb_to_hsv_batch(np.asarray(rgb, dtype=np.float64).reshape(1, 3))[0]
    return float(h), float(s), float(v)


def luminance(rgb: Sequence[float]) -> float:
    """Relative luminance of an 8-bit RGB triple on the 0-255 scale."""
    return float(np.dot(np.asarray(rgb, dtype=np.float64), LUMA_WEIGHTS))


def srgb_to_linear(rgb: np.ndarray) -> np.ndarray:
    """Undo the sRGB transfer curve for 8-bit values."""
    v = np.asarray(rgb, dtype=np.float64) / 255.0
    return np.where(v <= 0.04045, v / 12.92, ((v + 0.055) / 1.055) ** 2.4)


def rgb_to_oklab(rgb: Sequence[float]) -> Tuple[float, float, float]:
    """Convert an 8-bit sRGB triple to OKLab."""
    linear = srgb_to_linear(rgb)

    lms = np.dot(np.array([
        [0.4122214708, 0.5363325363, 0.0514459929],
        [0.2119034982, 0.6806995451, 0.1073969566],
        [0.0883024619, 0.2817188376, 0.6299787005]
    ]), linear)

    lms_ = np.cbrt(lms)

    lab = np.dot(np.array([
        [0.2104542553, 0.7936177850, -0.0040720468],
        [1.9779984951, -2.4285922050, 0.4505937099],
        [0.0259040371, 0.7827717662, -0.8086757660]
    ]), lms_)

    return float(lab[0]), float(lab[1]), float(lab[2])


def rgb_to_oklch(rgb: Sequence[float]) -> Tuple[float, float, float]:
    """Convert an 8-bit sRGB triple to OKLCH with hue in degrees [0, 360)."""
    l, a, b = rgb_to_oklab(rgb)
    c = float(np.hypot(a, b))
    h = float(np.degrees(np.arctan2(b, a)))
    if h < 0:
        h += 360.0
    return l, c, h


def clamp_rgb(rgb: Sequence[float]) -> Tuple[int, int, int]:
    """Round and clamp a float RGB triple to displayable 8-bit values."""
    r, g, b = (int(np.clip(np.floor(c + 0.5), 0, 255)) for c in rgb)
    return r, g, b


def rgb_hex(rgb: Sequence[float]) -> str:
    """Format an RGB triple as an uppercase #RRGGBB string."""
    return '#' + ''.join(f'{c:02X}' for c in clamp_rgb(rgb))
