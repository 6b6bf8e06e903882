"""Cross-frame state: scene cut detection and proportion stabilization."""

from .scene_cut import SceneChangeDetector
from .stabilizer import TemporalStabilizer, StabilizedProportions, ProportionSlot, StickyValue

__all__ = ['SceneChangeDetector', 'TemporalStabilizer', 'StabilizedProportions',
           'ProportionSlot', 'StickyValue']
