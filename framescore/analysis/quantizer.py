"""
Color quantization by k-means over filtered pixel samples.
Seeds with farthest-point selection and runs a fixed number of Lloyd passes
through scipy's kmeans2.
"""

import logging
import warnings
import numpy as np
from scipy.cluster.vq import kmeans2
from typing import List, Optional
from dataclasses import dataclass

from .color_space import clamp_rgb
from ..config import get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ColorCluster:
    """One dominant color of a frame."""
    centroid: tuple   # (R, G, B) floats, unrounded
    weight: float     # share of eligible samples, 0..1
    count: int

    @property
    def rgb(self):
        """Presentation color, rounded and clamped to 0..255."""
        return clamp_rgb(self.centroid)


class ColorQuantizer:
    """k-means color quantizer with deterministic farthest-point seeding."""

    def __init__(self, config=None, k: int = None, iterations: int = None,
                 seed: Optional[int] = None):
        """Initialize quantizer with configuration."""
        self.config = config or get_config()
        self.k = k if k is not None else self.config.cluster_count
        self.iterations = iterations if iterations is not None else self.config.cluster_iterations

        if seed is None:
            seed = self.config.quantizer_seed
        self._rng = np.random.default_rng(seed)

    def quantize(self, samples: np.ndarray, seed_index: int = None) -> List[ColorCluster]:
        """Cluster (N, 3) RGB samples and return clusters sorted by descending weight.

        ``seed_index`` pins the first centroid to a given sample, which makes
        the result fully deterministic for a given buffer.
        """
        samples = np.asarray(samples, dtype=np.float64)
        if samples.ndim != 2 or samples.shape[1] != 3:
            raise ValueError("Samples must have shape (N, 3)")

        n = samples.shape[0]
        if n == 0:
            return []

        if seed_index is None:
            seed_index = int(self._rng.integers(n))

        seeds = self._seed_centers(samples, seed_index)
        with warnings.catch_warnings():
            # empty clusters keep their seed centroid
            warnings.simplefilter('ignore', UserWarning)
            centers, assign = kmeans2(samples, seeds, iter=self.iterations,
                                      minit='matrix', missing='warn')

        counts = np.bincount(assign, minlength=self.k)
        clusters = [
            ColorCluster(centroid=tuple(float(c) for c in centers[j]),
                         weight=float(counts[j] / n),
                         count=int(counts[j]))
            for j in range(self.k)
        ]

        # Stable sort keeps centroid order for equal weights
        clusters.sort(key=lambda c: c.weight, reverse=True)
        logger.debug("Quantized %d samples into weights %s", n,
                     [round(c.weight, 3) for c in clusters])
        return clusters

    def _seed_centers(self, samples: np.ndarray, first: int) -> np.ndarray:
        """Greedy farthest-point seeding starting from ``samples[first]``."""
        centers = np.zeros((self.k, 3), dtype=np.float64)
        centers[0] = samples[first]

        min_dist = np.sum((samples - centers[0]) ** 2, axis=1)
        for ci in range(1, self.k):
            far_idx = int(np.argmax(min_dist))
            centers[ci] = samples[far_idx]
            min_dist = np.minimum(min_dist, np.sum((samples - centers[ci]) ** 2, axis=1))

        return centers
