"""
Per-frame analysis pipeline.

``FrameAnalyzer`` owns every piece of cross-frame state (scene mean, EMA,
hysteresis slots, display throttle) for one session. Each call to
:meth:`FrameAnalyzer.analyze` runs the color branch

    PixelFilter -> ColorQuantizer -> SceneChangeDetector -> TemporalStabilizer
    -> CompositionGrader

and, when the composition HUD is on, the independent saliency branch

    SaliencyEstimator -> GoldenRatioScorer

over the same downsampled buffer, and returns an immutable ``FrameResult``.
"""

import logging
import numpy as np
from typing import List, Optional, Tuple, Union
from dataclasses import dataclass

from .analysis.pixel_filter import filter_pixels
from .analysis.quantizer import ColorQuantizer, ColorCluster
from .analysis.saliency import SaliencyEstimator
from .analysis.palette import PaletteEntry, build_palette
from .temporal.scene_cut import SceneChangeDetector
from .temporal.stabilizer import TemporalStabilizer, StabilizedProportions
from .scoring.composition import CompositionGrader, CompositionScore
from .scoring.golden_ratio import GoldenRatioScorer, FocalPoint
from .io.frames import as_rgba, crop_frame
from .config import get_config

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaturationCutoff:
    """Host-side pixel eligibility settings."""
    min_saturation: float = 0.12
    include_neutrals: bool = False

    def clamped(self) -> 'SaturationCutoff':
        return SaturationCutoff(min(0.99, max(0.0, float(self.min_saturation))),
                                bool(self.include_neutrals))

    @property
    def effective(self) -> float:
        """Saturation floor actually applied; neutrals inclusion disables it."""
        return 0.0 if self.include_neutrals else self.min_saturation


@dataclass(frozen=True)
class FrameResult:
    """Everything the host needs to render one analysed frame."""
    timestamp: float
    proportions: StabilizedProportions
    composition: CompositionScore
    clusters: Tuple[ColorCluster, ...]
    scene_cut: bool
    focal_point: Optional[FocalPoint] = None
    frame_size: Tuple[int, int] = (0, 0)      # (width, height) of the analysed region
    display_refreshed: bool = True
    score_refreshed: bool = True
    target_reached: bool = False              # published score just became 100

    @property
    def palette(self) -> List[PaletteEntry]:
        return build_palette(self.proportions.colors)


class UpdateThrottle:
    """Rate limiter for display refreshes: every frame, or at most once per interval."""

    def __init__(self, mode: str = 'second', interval_ms: float = 1000.0):
        if mode not in ('frame', 'second'):
            raise ValueError(f"Unknown update mode: {mode}")
        self.mode = mode
        self.interval_ms = interval_ms
        self._last: Optional[float] = None

    def due(self, now: float) -> bool:
        """True when a refresh should happen at ``now``; records the refresh."""
        if self.mode == 'frame' or self._last is None or now - self._last >= self.interval_ms:
            self._last = now
            return True
        return False

    def force(self):
        """Make the next call to :meth:`due` fire."""
        self._last = None


class FrameAnalyzer:
    """Session-scoped frame analysis context."""

    def __init__(self, config=None, quantizer: ColorQuantizer = None,
                 stabilizer: TemporalStabilizer = None, saliency: SaliencyEstimator = None,
                 composition_hud: bool = None, aspect_ratio: str = None,
                 update_mode: str = None):
        """Initialize all pipeline stages from configuration."""
        self.config = config or get_config()

        self.quantizer = quantizer or ColorQuantizer(self.config)
        self.scene_detector = SceneChangeDetector(self.config)
        self.stabilizer = stabilizer or TemporalStabilizer(self.config)
        self.grader = CompositionGrader(self.config)
        self.saliency = saliency or SaliencyEstimator(self.config)
        self.golden = GoldenRatioScorer()

        self.composition_hud = self.config.composition_hud if composition_hud is None else composition_hud
        self.aspect_ratio = aspect_ratio or self.config.aspect_ratio
        self.min_value = self.config.min_value
        self.pixel_stride = self.config.get('sampling.pixel_stride', 3)

        interval = self.config.get('display.refresh_interval_ms', 1000.0)
        mode = update_mode or self.config.score_update_mode
        self._display_throttle = UpdateThrottle(mode, interval)
        self._score_throttle = UpdateThrottle(mode, interval)

        self._cutoff = SaturationCutoff(self.config.default_saturation_cutoff,
                                        self.config.include_neutrals).clamped()
        self._last_score: Optional[int] = None

    @property
    def cutoff(self) -> SaturationCutoff:
        return self._cutoff

    def set_cutoff(self, cutoff: SaturationCutoff):
        """Apply new eligibility settings, resetting temporal state if they changed."""
        cutoff = cutoff.clamped()
        if cutoff != self._cutoff:
            logger.info("Saturation cutoff changed to %.2f (neutrals %s)",
                        cutoff.min_saturation, 'on' if cutoff.include_neutrals else 'off')
            self._cutoff = cutoff
            self.reset()

    def set_update_mode(self, mode: str):
        """Switch display refresh mode and refresh on the next frame."""
        interval = self._display_throttle.interval_ms
        self._display_throttle = UpdateThrottle(mode, interval)
        self._score_throttle = UpdateThrottle(mode, interval)

    def reset(self):
        """Full reset: the next frame snaps instead of blending with stale state."""
        self.scene_detector.reset()
        self.stabilizer.reset()
        self._display_throttle.force()
        self._score_throttle.force()

    def analyze(self, frame: Union[np.ndarray, bytes], timestamp: float,
                cutoff: SaturationCutoff = None, width: int = None,
                height: int = None) -> Optional[FrameResult]:
        """Analyse one downsampled RGBA frame taken at ``timestamp`` milliseconds.

        Returns None when no pixel passes the eligibility filter. A scene cut
        on such a frame still clears the EMA; the hysteresis slots are kept.
        """
        if cutoff is not None:
            self.set_cutoff(cutoff)

        rgba = crop_frame(as_rgba(frame, width, height), self.aspect_ratio)
        region_h, region_w = rgba.shape[:2]

        cut = self.scene_detector.update(rgba)

        samples = filter_pixels(rgba, self._cutoff.effective, self.min_value,
                                self._cutoff.include_neutrals, self.pixel_stride)
        if not len(samples):
            logger.debug("Frame at %.0f ms has no eligible pixels, skipping", timestamp)
            if cut:
                # a cut still ends the old scene; displayed slots are kept
                self.stabilizer.clear_smoothing()
            return None

        clusters = self.quantizer.quantize(samples)
        proportions = self.stabilizer.update(clusters, timestamp, scene_cut=cut)
        composition = self.grader.grade(proportions.percentages)

        focal = None
        if self.composition_hud:
            focal = self.locate_focal_point(rgba)

        score_refreshed = self._score_throttle.due(timestamp)
        target_reached = False
        if score_refreshed:
            target_reached = composition.score == 100 and self._last_score != 100
            self._last_score = composition.score

        return FrameResult(
            timestamp=timestamp,
            proportions=proportions,
            composition=composition,
            clusters=tuple(clusters),
            scene_cut=cut,
            focal_point=focal,
            frame_size=(region_w, region_h),
            display_refreshed=self._display_throttle.due(timestamp),
            score_refreshed=score_refreshed,
            target_reached=target_reached,
        )

    def locate_focal_point(self, rgba: np.ndarray) -> FocalPoint:
        """Saliency branch: focal centroid scored against the golden-ratio power points."""
        height, width = rgba.shape[:2]
        return self.golden.focal_point(self.saliency.estimate(rgba), width, height)
