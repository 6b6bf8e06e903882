"""
Temporal stabilization of per-frame color proportions.

Two layers run in order on the three live clusters:

1. an exponential moving average over the percentage vector, cleared on scene cuts
2. a per-slot hysteresis ("sticky") filter that ignores changes under the soft
   threshold, commits soft-band changes only after they persist for ``wait_ms``
   and commits changes over the hard threshold immediately
"""

import logging
import math
import itertools
import numpy as np
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass

from ..analysis.quantizer import ColorCluster
from ..config import get_config

logger = logging.getLogger(__name__)


SLOT_COUNT = 3
NEUTRAL_GRAY = (60, 60, 60)


@dataclass
class StickyValue:
    """Hysteresis state of one display slot."""
    value: float = 0.0
    since: Optional[float] = None   # start of the pending soft-band timer
    initialized: bool = False

    def update(self, measured: float, now: float, soft: float = 1.0,
               hard: float = 3.0, wait_ms: float = 3000.0) -> float:
        """Feed a measured percentage and return the value to display."""
        if not self.initialized or not math.isfinite(self.value):
            self.value = measured
            self.initialized = True
            self.since = None
            return self.value

        diff = abs(measured - self.value)
        if diff >= hard:
            self.value = measured
            self.since = None
        elif diff >= soft:
            if self.since is None:
                self.since = now
            if now - self.since >= wait_ms:
                self.value = measured
                self.since = None
        else:
            # back inside the dead-band
            self.since = None
        return self.value

    def reset(self):
        self.value = 0.0
        self.since = None
        self.initialized = False


@dataclass(frozen=True)
class ProportionSlot:
    """One display-ready segment."""
    displayed_pct: float
    color: Tuple[int, int, int]
    measured_pct: float = 0.0   # EMA-smoothed value before hysteresis


@dataclass(frozen=True)
class StabilizedProportions:
    """Exactly three segments sorted by descending displayed percentage."""
    slots: Tuple[ProportionSlot, ...]

    def __len__(self):
        return len(self.slots)

    def __iter__(self):
        return iter(self.slots)

    def __getitem__(self, index):
        return self.slots[index]

    @property
    def percentages(self) -> List[float]:
        return [s.displayed_pct for s in self.slots]

    @property
    def colors(self) -> List[Tuple[int, int, int]]:
        return [s.color for s in self.slots]


def cluster_vector(clusters: Sequence[ColorCluster]) -> Tuple[np.ndarray, List[Tuple[int, int, int]]]:
    """Percentages and colors of the top three clusters, padded with neutral gray."""
    pcts = np.zeros(SLOT_COUNT, dtype=np.float64)
    colors = [NEUTRAL_GRAY] * SLOT_COUNT

    for i, cluster in enumerate(list(clusters)[:SLOT_COUNT]):
        if cluster.weight > 0:
            pcts[i] = 100.0 * cluster.weight
            colors[i] = cluster.rgb
    return pcts, colors


class TemporalStabilizer:
    """EMA + hysteresis stabilizer owning all cross-frame proportion state."""

    def __init__(self, config=None, ema_alpha: float = None, soft_threshold: float = None,
                 hard_threshold: float = None, wait_ms: float = None, slot_matching: str = None):
        """Initialize stabilizer with configuration."""
        self.config = config or get_config()
        self.ema_alpha = ema_alpha if ema_alpha is not None else self.config.ema_alpha
        self.soft_threshold = soft_threshold if soft_threshold is not None else self.config.soft_threshold
        self.hard_threshold = hard_threshold if hard_threshold is not None else self.config.hard_threshold
        self.wait_ms = wait_ms if wait_ms is not None else self.config.wait_ms
        self.slot_matching = slot_matching or self.config.slot_matching

        if self.slot_matching not in ('rank', 'color'):
            raise ValueError(f"Unknown slot matching mode: {self.slot_matching}")

        self._ema: Optional[np.ndarray] = None
        self._colors: Optional[List[Tuple[int, int, int]]] = None
        self._sticky = [StickyValue() for _ in range(SLOT_COUNT)]

    @property
    def ema(self) -> Optional[np.ndarray]:
        return None if self._ema is None else self._ema.copy()

    @property
    def sticky(self) -> List[StickyValue]:
        return list(self._sticky)

    def update(self, clusters: Sequence[ColorCluster], now: float,
               scene_cut: bool = False) -> StabilizedProportions:
        """Fold one frame's clusters into the smoothed state.

        ``now`` is a monotonic timestamp in milliseconds; frames must arrive in
        order.
        """
        pcts, colors = cluster_vector(clusters)

        if scene_cut:
            self.clear_smoothing()

        if self.slot_matching == 'color' and self._ema is not None and self._colors is not None:
            order = self._match_colors(colors)
            pcts = pcts[list(order)]
            colors = [colors[i] for i in order]

        if self._ema is None:
            self._ema = pcts.copy()
        else:
            self._ema = self._ema * (1 - self.ema_alpha) + pcts * self.ema_alpha

        total = float(self._ema.sum()) or 1.0
        measured = self._ema * 100.0 / total

        displayed = [
            sticky.update(float(m), now, self.soft_threshold, self.hard_threshold, self.wait_ms)
            for sticky, m in zip(self._sticky, measured)
        ]
        self._colors = colors

        slots = [
            ProportionSlot(displayed_pct=d, color=c, measured_pct=float(m))
            for d, c, m in zip(displayed, colors, measured)
        ]
        slots.sort(key=lambda s: s.displayed_pct, reverse=True)
        return StabilizedProportions(slots=tuple(slots))

    def _match_colors(self, colors: List[Tuple[int, int, int]]) -> Tuple[int, ...]:
        """Permutation of incoming slots that best continues the previous slot colors."""
        prev = np.asarray(self._colors, dtype=np.float64)
        new = np.asarray(colors, dtype=np.float64)
        cost = np.sum((prev[:, np.newaxis, :] - new[np.newaxis, :, :]) ** 2, axis=2)

        best, best_cost = tuple(range(SLOT_COUNT)), math.inf
        for perm in itertools.permutations(range(SLOT_COUNT)):
            total = sum(cost[slot, src] for slot, src in enumerate(perm))
            if total < best_cost:
                best, best_cost = perm, total
        return best

    def clear_smoothing(self):
        """Drop the EMA so the next frame becomes the new baseline."""
        logger.debug("Clearing proportion EMA")
        self._ema = None
        self._colors = None

    def reset(self):
        """Clear EMA and hysteresis state, e.g. after a configuration change."""
        logger.debug("Resetting stabilizer state")
        self.clear_smoothing()
        for sticky in self._sticky:
            sticky.reset()
