"""
Saliency estimation for the composition HUD.

The map combines three cues computed on the analysis buffer:

- a saturation multiplier ``S0 = (1 - beta) + beta * sat ** gamma``
- local luminance contrast against a 3x3 box blur
- Sobel edge energy of the luminance

Contrast and edge terms are normalized by their per-frame maxima and blended as
``S0 * (0.5 + 0.5 * contrast) * (0.5 + 0.5 * edge)``. The focal centroid is the
saliency-weighted mean position of the top ``quantile`` percent of pixels.
"""

import numpy as np
from typing import Optional, Tuple
from scipy import ndimage

from .color_space import LUMA_WEIGHTS
from ..config import get_config


class SaliencyEstimator:
    """Per-pixel saliency map and focal centroid extraction."""

    def __init__(self, config=None, saturation_weight: float = None,
                 saturation_gamma: float = None, quantile: float = None):
        """Initialize estimator with configuration."""
        self.config = config or get_config()
        self.saturation_weight = saturation_weight if saturation_weight is not None \
            else self.config.saturation_weight
        self.saturation_gamma = saturation_gamma if saturation_gamma is not None \
            else self.config.saturation_gamma
        self.quantile = quantile if quantile is not None else self.config.saliency_quantile

    def compute_map(self, rgba: np.ndarray) -> np.ndarray:
        """Compute the saliency map of an RGBA frame.

        The outermost 1-pixel ring has no full 3x3 neighbourhood and is left at 0.
        """
        if rgba.ndim != 3 or rgba.shape[2] < 3:
            raise ValueError("Frame must have shape (H, W, 3|4)")

        rgb = rgba[:, :, :3].astype(np.float64)
        height, width = rgb.shape[:2]
        saliency = np.zeros((height, width), dtype=np.float64)
        if height < 3 or width < 3:
            return saliency

        luma = rgb @ LUMA_WEIGHTS

        max_c = rgb.max(axis=2)
        min_c = rgb.min(axis=2)
        sat = np.divide(max_c - min_c, max_c, out=np.zeros_like(max_c), where=max_c > 0)
        beta, gamma = self.saturation_weight, self.saturation_gamma
        sat_term = (1.0 - beta) + beta * np.power(sat, gamma)

        interior = (slice(1, -1), slice(1, -1))

        blur = ndimage.uniform_filter(luma, size=3)
        contrast = np.abs(luma - blur)[interior]

        gx = ndimage.sobel(luma, axis=1)
        gy = ndimage.sobel(luma, axis=0)
        edge = np.hypot(gx, gy)[interior]

        contrast = contrast / max(float(contrast.max()), 1e-6)
        edge = edge / max(float(edge.max()), 1e-6)

        saliency[interior] = sat_term[interior] * (0.5 + 0.5 * contrast) * (0.5 + 0.5 * edge)
        return saliency

    def threshold(self, saliency: np.ndarray) -> float:
        """Saliency value at the ``quantile``-th percentile from the top of the interior."""
        values = saliency[1:-1, 1:-1].ravel()
        if values.size == 0:
            return 0.0

        ranked = np.sort(values)[::-1]
        idx = max(0, int(np.floor(self.quantile / 100.0 * ranked.size)) - 1)
        return float(ranked[min(idx, ranked.size - 1)])

    def centroid(self, saliency: np.ndarray) -> Optional[Tuple[float, float]]:
        """Saliency-weighted centroid (x, y) of the kept pixels, or None if none survive."""
        cutoff = self.threshold(saliency)

        weights = np.where(saliency >= cutoff, saliency, 0.0).astype(np.float64)
        weights[0, :] = weights[-1, :] = 0.0
        weights[:, 0] = weights[:, -1] = 0.0

        total = weights.sum()
        if total <= 0:
            return None

        ys, xs = np.indices(weights.shape)
        return float((xs * weights).sum() / total), float((ys * weights).sum() / total)

    def estimate(self, rgba: np.ndarray) -> Optional[Tuple[float, float]]:
        """Focal centroid of an RGBA frame."""
        return self.centroid(self.compute_map(rgba))
