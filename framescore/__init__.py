"""
FrameScore - Live Color Proportion and Composition Analysis

Scores video frames against a 60/30/10 dominant/secondary/accent color split
and measures how well the salient region sits on the golden-ratio power points.
"""

__version__ = "1.0.0"

from . import io, analysis, temporal, scoring, visualization
from .pipeline import FrameAnalyzer, FrameResult, SaturationCutoff

__all__ = ['io', 'analysis', 'temporal', 'scoring', 'visualization',
           'FrameAnalyzer', 'FrameResult', 'SaturationCutoff']
