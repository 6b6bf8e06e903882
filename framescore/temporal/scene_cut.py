"""Scene cut detection from the sparse mean color of consecutive frames."""

import logging
import numpy as np
from typing import Optional

from ..config import get_config

logger = logging.getLogger(__name__)


class SceneChangeDetector:
    """Flags abrupt global color shifts between consecutive frames."""

    def __init__(self, config=None, threshold: float = None, pixel_stride: int = None):
        """Initialize detector with configuration."""
        self.config = config or get_config()
        self.threshold = threshold if threshold is not None else self.config.scene_cut_threshold
        self.pixel_stride = pixel_stride if pixel_stride is not None \
            else self.config.get('scene_cut.pixel_stride', 8)

        self._last_mean: Optional[np.ndarray] = None

    @property
    def last_mean(self) -> Optional[np.ndarray]:
        return None if self._last_mean is None else self._last_mean.copy()

    def sparse_mean(self, rgba: np.ndarray) -> np.ndarray:
        """Mean RGB over every ``pixel_stride``-th pixel of the frame."""
        pixels = rgba.reshape(-1, rgba.shape[-1])[::self.pixel_stride, :3]
        return pixels.astype(np.float64).mean(axis=0)

    def update(self, rgba: np.ndarray) -> bool:
        """Record the frame's mean color and report whether it starts a new scene."""
        mean = self.sparse_mean(rgba)

        if self._last_mean is None:
            self._last_mean = mean
            return False

        distance = float(np.linalg.norm(mean - self._last_mean))
        self._last_mean = mean

        if distance > self.threshold:
            logger.debug("Scene cut: mean color moved %.1f (threshold %.1f)", distance, self.threshold)
            return True
        return False

    def reset(self):
        """Forget the previous frame."""
        self._last_mean = None
