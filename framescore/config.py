"""
Configuration management for the FrameScore analysis pipeline.
Loads settings from YAML file with validation and defaults.
"""

import yaml
import os
from typing import Any, List, Optional

_MISSING = object()


class FrameScoreConfig:
    """Configuration manager for the FrameScore pipeline."""

    def __init__(self, config_path: str = None):
        """Initialize configuration from YAML file."""
        if config_path is None:
            config_path = os.path.join(os.path.dirname(__file__), 'config.yaml')

        self.config_path = config_path
        self._config = None
        self.load_config()

    def load_config(self):
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self._config = yaml.safe_load(f) or {}
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Error parsing configuration file: {e}")

    def get(self, key_path: str, default: Any = _MISSING) -> Any:
        """Get configuration value using dot notation (e.g., 'stabilizer.ema_alpha')."""
        keys = key_path.split('.')
        value = self._config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            if default is not _MISSING:
                return default
            raise KeyError(f"Configuration key not found: {key_path}")

    def set(self, key_path: str, value: Any):
        """Set configuration value using dot notation."""
        keys = key_path.split('.')
        config = self._config

        for key in keys[:-1]:
            if key not in config:
                config[key] = {}
            config = config[key]

        config[keys[-1]] = value

    def save_config(self, config_path: str = None):
        """Save current configuration to YAML file."""
        if config_path is None:
            config_path = self.config_path

        with open(config_path, 'w') as f:
            yaml.dump(self._config, f, default_flow_style=False, indent=2)

    @property
    def downscale_width(self) -> int:
        """Width of the analysis buffer in pixels."""
        return self.get('sampling.downscale_width', 320)

    @property
    def min_value(self) -> float:
        """HSV value floor below which pixels are ignored as too dark."""
        return self.get('sampling.min_value', 0.08)

    @property
    def default_saturation_cutoff(self) -> float:
        """Saturation cutoff used when the host does not pass one."""
        return self.get('sampling.saturation_cutoff', 0.12)

    @property
    def include_neutrals(self) -> bool:
        """Whether low-saturation pixels take part in clustering."""
        return bool(self.get('sampling.include_neutrals', False))

    @property
    def cluster_count(self) -> int:
        """Number of clusters for live scoring."""
        return self.get('quantizer.k', 3)

    @property
    def cluster_iterations(self) -> int:
        """Lloyd passes for live scoring."""
        return self.get('quantizer.iterations', 7)

    @property
    def quantizer_seed(self) -> Optional[int]:
        """Seed for the random first centroid; None draws from OS entropy."""
        return self.get('quantizer.seed', None)

    @property
    def scene_cut_threshold(self) -> float:
        """Mean RGB distance that counts as a scene cut."""
        return self.get('scene_cut.threshold', 12.0)

    @property
    def ema_alpha(self) -> float:
        """EMA smoothing factor for cluster proportions."""
        return self.get('stabilizer.ema_alpha', 0.35)

    @property
    def soft_threshold(self) -> float:
        """Percentage-point change that arms the hysteresis timer."""
        return self.get('stabilizer.soft_threshold', 1.0)

    @property
    def hard_threshold(self) -> float:
        """Percentage-point change that updates the display immediately."""
        return self.get('stabilizer.hard_threshold', 3.0)

    @property
    def wait_ms(self) -> float:
        """Time a soft-band change must persist before it is shown."""
        return self.get('stabilizer.wait_ms', 3000.0)

    @property
    def slot_matching(self) -> str:
        """How clusters map onto display slots between frames: 'rank' or 'color'."""
        return self.get('stabilizer.slot_matching', 'rank')

    @property
    def target_triplet(self) -> List[float]:
        """Target dominant/secondary/accent split in percent."""
        return self.get('composition.target', [60, 30, 10])

    @property
    def segment_weights(self) -> List[float]:
        """Penalty weight of each ranked segment."""
        return self.get('composition.weights', [0.5, 0.35, 0.15])

    @property
    def saturation_weight(self) -> float:
        """Blend between flat and saturation-driven saliency (0..1)."""
        return self.get('saliency.saturation_weight', 0.0)

    @property
    def saturation_gamma(self) -> float:
        """Exponent applied to saturation in the saliency multiplier (0..2)."""
        return self.get('saliency.saturation_gamma', 1.0)

    @property
    def saliency_quantile(self) -> float:
        """Percentage of most salient pixels kept for the focal centroid."""
        return self.get('saliency.quantile', 5.0)

    @property
    def score_update_mode(self) -> str:
        """Display refresh mode: 'frame' or 'second'."""
        return self.get('display.score_update_mode', 'second')

    @property
    def composition_hud(self) -> bool:
        """Whether the golden-ratio branch runs."""
        return bool(self.get('display.composition_hud', True))

    @property
    def aspect_ratio(self) -> str:
        """Aspect-ratio preset used to crop the analysed region."""
        return self.get('display.aspect_ratio', 'native')


# Global configuration instance
_config_instance = None


def get_config(config_path: str = None) -> FrameScoreConfig:
    """Get global configuration instance."""
    global _config_instance
    if _config_instance is None:
        _config_instance = FrameScoreConfig(config_path)
    return _config_instance


def reload_config(config_path: str = None) -> FrameScoreConfig:
    """Reload global configuration."""
    global _config_instance
    _config_instance = FrameScoreConfig(config_path)
    return _config_instance
