"""
Grading of dominant/secondary/accent proportions against a target split.
The grade is a pure function of the three percentages.
"""

import math
from typing import List, Sequence
from dataclasses import dataclass

from ..config import get_config


TARGET_TRIPLET = (60.0, 30.0, 10.0)
SEGMENT_WEIGHTS = (0.5, 0.35, 0.15)
DEVIATION_CAP = 30.0
PASS_SCORE = 85
FAIL_SCORE = 60


@dataclass(frozen=True)
class CompositionScore:
    """Result of grading one frame's proportions."""
    score: int           # 0..100
    tag: str             # 'pass' | 'warn' | 'fail'
    actual: List[int]    # ranked percentages, rounded


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def tag_for_score(score: float, pass_score: float = PASS_SCORE,
                  fail_score: float = FAIL_SCORE) -> str:
    """Map a 0-100 score onto the pass/warn/fail bands."""
    if score >= pass_score:
        return 'pass'
    if score < fail_score:
        return 'fail'
    return 'warn'


def grade(pcts: Sequence[float], target: Sequence[float] = TARGET_TRIPLET,
          weights: Sequence[float] = SEGMENT_WEIGHTS,
          deviation_cap: float = DEVIATION_CAP) -> CompositionScore:
    """Grade percentages against the target split.

    Values are ranked descending, cut to three (missing segments count as 0)
    and renormalized to sum to 100. Each ranked segment contributes
    ``weight * min(1, |actual - target| / deviation_cap)`` to the penalty.

    >>> grade([60, 30, 10]).score
    100
    """
    ranked = sorted((float(p) for p in pcts), reverse=True)[:3]
    ranked += [0.0] * (3 - len(ranked))

    total = sum(ranked)
    if total > 0 and not math.isclose(total, 100.0):
        ranked = [p * 100.0 / total for p in ranked]

    penalty = sum(
        w * min(1.0, abs(a - t) / deviation_cap)
        for a, t, w in zip(ranked, target, weights)
    )
    score = round_half_up(max(0.0, 100.0 * (1.0 - penalty)))

    return CompositionScore(
        score=score,
        tag=tag_for_score(score),
        actual=[round_half_up(p) for p in ranked],
    )


class CompositionGrader:
    """Configurable front-end to :func:`grade`."""

    def __init__(self, config=None):
        """Initialize grader from the ``composition`` configuration section."""
        self.config = config or get_config()
        self.target = tuple(self.config.target_triplet)
        self.weights = tuple(self.config.segment_weights)
        self.deviation_cap = self.config.get('composition.deviation_cap', DEVIATION_CAP)
        self.pass_score = self.config.get('composition.pass_score', PASS_SCORE)
        self.fail_score = self.config.get('composition.fail_score', FAIL_SCORE)

    def grade(self, pcts: Sequence[float]) -> CompositionScore:
        result = grade(pcts, self.target, self.weights, self.deviation_cap)
        return CompositionScore(
            score=result.score,
            tag=tag_for_score(result.score, self.pass_score, self.fail_score),
            actual=result.actual,
        )
