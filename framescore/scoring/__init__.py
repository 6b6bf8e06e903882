"""Composition scoring heuristics."""

from .composition import CompositionGrader, CompositionScore, grade
from .golden_ratio import GoldenRatioScorer, FocalPoint

__all__ = ['CompositionGrader', 'CompositionScore', 'grade', 'GoldenRatioScorer', 'FocalPoint']
