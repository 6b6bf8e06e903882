"""Tests for scene cut detection and proportion stabilization."""

import numpy as np
import pytest

from framescore.analysis.quantizer import ColorCluster
from framescore.temporal.scene_cut import SceneChangeDetector
from framescore.temporal.stabilizer import TemporalStabilizer, StickyValue, NEUTRAL_GRAY
from framescore.config import FrameScoreConfig

RED = (255.0, 0.0, 0.0)
BLUE = (0.0, 0.0, 255.0)
GREEN = (0.0, 255.0, 0.0)


def clusters(*pairs):
    return [ColorCluster(centroid=c, weight=w, count=int(w * 100)) for c, w in pairs]


def uniform_frame(rgb, width=32, height=24):
    frame = np.zeros((height, width, 4), dtype=np.uint8)
    frame[:, :, :3] = rgb
    frame[:, :, 3] = 255
    return frame


@pytest.fixture
def config():
    return FrameScoreConfig()


@pytest.fixture
def stabilizer(config):
    return TemporalStabilizer(config, slot_matching='rank')


# Hysteresis filter

def test_sticky_snaps_when_uninitialized():
    sticky = StickyValue()
    assert sticky.update(42.0, 0) == 42.0
    assert sticky.initialized


def test_sticky_ignores_soft_band_without_elapsed_wait():
    sticky = StickyValue()
    sticky.update(50.0, 1000)
    for measured in (50.5, 51.0, 51.5):
        assert sticky.update(measured, 1000) == 50.0


def test_sticky_hard_threshold_snaps_immediately():
    sticky = StickyValue()
    sticky.update(50.0, 1000)
    assert sticky.update(54.0, 1000) == 54.0
    assert sticky.since is None


def test_sticky_soft_band_commits_after_wait():
    sticky = StickyValue()
    sticky.update(50.0, 0)
    assert sticky.update(51.5, 100) == 50.0
    assert sticky.update(51.5, 3000) == 50.0
    assert sticky.update(51.5, 3100) == 51.5
    assert sticky.since is None


def test_sticky_timer_starts_at_time_zero():
    sticky = StickyValue()
    sticky.update(50.0, 0)
    assert sticky.update(51.5, 0) == 50.0
    assert sticky.since == 0
    assert sticky.update(51.5, 3000) == 51.5


def test_sticky_dead_band_clears_timer():
    sticky = StickyValue()
    sticky.update(50.0, 0)
    sticky.update(51.5, 0)
    assert sticky.update(50.2, 2000) == 50.0
    assert sticky.since is None
    assert sticky.update(51.5, 3500) == 50.0
    assert sticky.update(51.5, 6400) == 50.0
    assert sticky.update(51.5, 6500) == 51.5


def test_sticky_recovers_from_non_finite_value():
    sticky = StickyValue(value=float('nan'), initialized=True)
    assert sticky.update(20.0, 0) == 20.0


# Stabilizer

def test_first_frame_is_adopted(stabilizer):
    result = stabilizer.update(clusters((RED, 0.6), (BLUE, 0.3), (GREEN, 0.1)), 0)
    assert result.percentages == pytest.approx([60, 30, 10])
    assert result.colors == [(255, 0, 0), (0, 0, 255), (0, 255, 0)]


def test_ema_blends_and_hysteresis_holds(stabilizer):
    stabilizer.update(clusters((RED, 0.6), (BLUE, 0.3), (GREEN, 0.1)), 0)
    result = stabilizer.update(clusters((RED, 0.5), (BLUE, 0.35), (GREEN, 0.15)), 16)

    assert stabilizer.ema == pytest.approx([56.5, 31.75, 11.75])
    # slot 0 moved 3.5 points (hard), slots 1 and 2 only 1.75 (soft)
    assert result.percentages == pytest.approx([56.5, 30, 10])
    assert [s.measured_pct for s in result] == pytest.approx([56.5, 31.75, 11.75])


def test_scene_cut_clears_ema(stabilizer):
    stabilizer.update(clusters((RED, 0.6), (BLUE, 0.3), (GREEN, 0.1)), 0)
    result = stabilizer.update(clusters((RED, 0.5), (BLUE, 0.35), (GREEN, 0.15)), 16, scene_cut=True)

    assert stabilizer.ema == pytest.approx([50, 35, 15])
    assert result.percentages == pytest.approx([50, 35, 15])


def test_padding_to_three_slots(stabilizer):
    result = stabilizer.update(clusters((RED, 0.75), (BLUE, 0.25), (GREEN, 0.0)), 0)
    assert len(result) == 3
    assert result[2].displayed_pct == 0
    assert result[2].color == NEUTRAL_GRAY

    result = stabilizer.update(clusters((RED, 1.0)), 0, scene_cut=True)
    assert len(result) == 3
    assert result.colors[1:] == [NEUTRAL_GRAY, NEUTRAL_GRAY]


def test_output_sorted_descending(stabilizer):
    stabilizer.update(clusters((RED, 0.4), (BLUE, 0.35), (GREEN, 0.25)), 0)
    result = stabilizer.update(clusters((RED, 0.4), (BLUE, 0.35), (GREEN, 0.25)), 10)
    pcts = result.percentages
    assert pcts == sorted(pcts, reverse=True)


def test_reset_clears_everything(stabilizer):
    stabilizer.update(clusters((RED, 0.6), (BLUE, 0.3), (GREEN, 0.1)), 0)
    stabilizer.reset()
    assert stabilizer.ema is None
    assert not any(s.initialized for s in stabilizer.sticky)

    result = stabilizer.update(clusters((RED, 0.5), (BLUE, 0.35), (GREEN, 0.15)), 10)
    assert result.percentages == pytest.approx([50, 35, 15])


def test_rank_matching_follows_weight_order(config):
    stabilizer = TemporalStabilizer(config, slot_matching='rank')
    stabilizer.update(clusters((RED, 0.5), (BLUE, 0.45), (GREEN, 0.05)), 0)
    result = stabilizer.update(clusters((BLUE, 0.5), (RED, 0.45), (GREEN, 0.05)), 16)

    assert result.percentages == pytest.approx([50, 45, 5])
    assert result.colors[0] == (0, 0, 255)


def test_color_matching_keeps_slot_identity(config):
    stabilizer = TemporalStabilizer(config, slot_matching='color')
    stabilizer.update(clusters((RED, 0.5), (BLUE, 0.45), (GREEN, 0.05)), 0)
    result = stabilizer.update(clusters((BLUE, 0.5), (RED, 0.45), (GREEN, 0.05)), 16)

    # red slot smoothed 50 -> 48.25 and blue 45 -> 46.75, both inside the soft band
    assert stabilizer.ema == pytest.approx([48.25, 46.75, 5])
    assert result.percentages == pytest.approx([50, 45, 5])
    assert result.colors == [(255, 0, 0), (0, 0, 255), (0, 255, 0)]


def test_unknown_slot_matching_rejected(config):
    with pytest.raises(ValueError):
        TemporalStabilizer(config, slot_matching='identity')


# Scene cut detector

def test_first_frame_never_cuts(config):
    detector = SceneChangeDetector(config)
    assert detector.update(uniform_frame((200, 10, 10))) is False


def test_identical_frames_never_cut(config):
    detector = SceneChangeDetector(config)
    frame = uniform_frame((120, 80, 40))
    assert [detector.update(frame) for _ in range(5)] == [False] * 5


def test_large_shift_cuts(config):
    detector = SceneChangeDetector(config)
    detector.update(uniform_frame((100, 100, 100)))
    # distance sqrt(3 * 10^2) ~ 17.3
    assert detector.update(uniform_frame((110, 110, 110))) is True


def test_small_shift_does_not_cut(config):
    detector = SceneChangeDetector(config)
    detector.update(uniform_frame((100, 100, 100)))
    # distance sqrt(3 * 5^2) ~ 8.7
    assert detector.update(uniform_frame((105, 105, 105))) is False


def test_mean_updates_after_cut(config):
    detector = SceneChangeDetector(config)
    detector.update(uniform_frame((0, 0, 0)))
    assert detector.update(uniform_frame((100, 100, 100))) is True
    assert detector.last_mean == pytest.approx([100, 100, 100])
    assert detector.update(uniform_frame((100, 100, 100))) is False


def test_reset_forgets_previous_mean(config):
    detector = SceneChangeDetector(config)
    detector.update(uniform_frame((0, 0, 0)))
    detector.reset()
    assert detector.update(uniform_frame((250, 250, 250))) is False
