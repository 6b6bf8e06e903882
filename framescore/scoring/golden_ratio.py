"""Golden-ratio power point scoring of a focal centroid."""

import math
from typing import List, Optional, Tuple
from dataclasses import dataclass

from .composition import tag_for_score


PHI = 1.61803398875
RADIUS_FRACTION = 0.15   # distance (as a share of the diagonal) at which the score hits 0


@dataclass(frozen=True)
class FocalPoint:
    """Focal centroid of a frame and its golden-ratio alignment."""
    x: float
    y: float
    score: int
    nearest_corner: Optional[str]   # 'tl' | 'tr' | 'bl' | 'br' | None

    @property
    def tag(self) -> str:
        return tag_for_score(self.score)


def power_points(width: float, height: float) -> List[Tuple[str, float, float]]:
    """The four golden-ratio power points as (corner, x, y)."""
    x_near, x_far = width / PHI, width - width / PHI
    y_near, y_far = height / PHI, height - height / PHI
    return [
        ('tl', x_near, y_near),
        ('bl', x_near, y_far),
        ('tr', x_far, y_near),
        ('br', x_far, y_far),
    ]


class GoldenRatioScorer:
    """Score how close a focal point sits to the nearest golden-ratio power point."""

    def __init__(self, radius_fraction: float = RADIUS_FRACTION):
        self.radius_fraction = radius_fraction

    def score(self, x: float, y: float, width: float, height: float) -> Tuple[int, str]:
        """Return (score 0-100, nearest corner label) for a point in a width x height frame."""
        best_corner, best_d2 = None, math.inf
        for corner, px, py in power_points(width, height):
            d2 = (x - px) ** 2 + (y - py) ** 2
            if d2 < best_d2:
                best_corner, best_d2 = corner, d2

        diagonal = math.hypot(width, height)
        raw = 100.0 * (1.0 - math.sqrt(best_d2) / (self.radius_fraction * diagonal))
        return int(min(100, max(0, math.floor(raw + 0.5)))), best_corner

    def focal_point(self, centroid: Optional[Tuple[float, float]],
                    width: float, height: float) -> FocalPoint:
        """Build the focal point record, falling back to frame center when no centroid exists."""
        if centroid is None:
            return FocalPoint(x=width / 2, y=height / 2, score=0, nearest_corner=None)

        cx, cy = centroid
        value, corner = self.score(cx, cy, width, height)
        return FocalPoint(x=cx, y=cy, score=value, nearest_corner=corner)
