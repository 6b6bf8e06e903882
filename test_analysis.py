"""Tests for pixel filtering, quantization, saliency and palette helpers."""

import numpy as np
import pytest

from framescore.analysis.pixel_filter import filter_pixels, opaque_pixels
from framescore.analysis.quantizer import ColorQuantizer
from framescore.analysis.saliency import SaliencyEstimator
from framescore.analysis.palette import (build_palette, palette_export_text, derive_theme,
                                         theme_size, format_rgb)
from framescore.analysis.color_space import hsv_of, rgb_hex, clamp_rgb, rgb_to_oklch
from framescore.config import FrameScoreConfig


def create_test_frame(bands, width=60):
    """Stack horizontal bands of (rgb, rows) into an opaque RGBA frame."""
    rows = []
    for rgb, count in bands:
        band = np.zeros((count, width, 4), dtype=np.uint8)
        band[:, :, :3] = rgb
        band[:, :, 3] = 255
        rows.append(band)
    return np.concatenate(rows, axis=0)


@pytest.fixture
def config():
    return FrameScoreConfig()


# Color space

def test_hsv_of_primaries():
    assert hsv_of((255, 0, 0)) == pytest.approx((0.0, 1.0, 1.0))
    assert hsv_of((0, 255, 0)) == pytest.approx((1 / 3, 1.0, 1.0))
    assert hsv_of((0, 0, 0)) == pytest.approx((0.0, 0.0, 0.0))


def test_saturation_on_cutoff_boundary_uses_double_precision():
    import colorsys

    # (100 - 88) / 100 sits right on the default 0.12 cutoff
    expected = colorsys.rgb_to_hsv(100 / 255, 88 / 255, 88 / 255)[1]
    assert hsv_of((100, 88, 88))[1] == expected

    frame = create_test_frame([((100, 88, 88), 1)], width=6)
    kept = len(filter_pixels(frame, 0.12))
    assert kept == (2 if expected >= 0.12 else 0)


def test_hex_and_clamp():
    assert rgb_hex((255, 128, 0)) == '#FF8000'
    assert clamp_rgb((300, -5, 127.5)) == (255, 0, 128)


def test_oklch_of_red():
    l, c, h = rgb_to_oklch((255, 0, 0))
    assert l == pytest.approx(0.628, abs=1e-3)
    assert c == pytest.approx(0.258, abs=1e-3)
    assert h == pytest.approx(29.2, abs=0.1)


# Pixel filter

def test_filter_keeps_saturated_pixels():
    frame = create_test_frame([((255, 0, 0), 4)], width=3)
    samples = filter_pixels(frame, 0.12)
    # stride 3 over 12 pixels
    assert samples.shape == (4, 3)
    assert np.all(samples == [255, 0, 0])


def test_filter_drops_dark_pixels():
    frame = create_test_frame([((10, 0, 0), 4)], width=6)
    assert len(filter_pixels(frame, 0.0, include_neutrals=True)) == 0


def test_filter_neutrals_toggle():
    frame = create_test_frame([((128, 128, 128), 4)], width=6)
    assert len(filter_pixels(frame, 0.12)) == 0
    assert len(filter_pixels(frame, 0.12, include_neutrals=True)) == 8


def test_filter_zero_cutoff_keeps_grays():
    frame = create_test_frame([((128, 128, 128), 2)], width=6)
    assert len(filter_pixels(frame, 0.0)) == 4


def test_opaque_pixels_filters_alpha():
    frame = create_test_frame([((0, 200, 0), 2)], width=8)
    frame[0, :, 3] = 100
    samples = opaque_pixels(frame)
    assert samples.shape == (2, 3)


# Quantizer

def test_weights_sum_to_one(config):
    rng = np.random.default_rng(7)
    samples = rng.integers(0, 256, size=(500, 3)).astype(np.float64)
    clusters = ColorQuantizer(config, seed=3).quantize(samples)

    assert len(clusters) == 3
    assert sum(c.weight for c in clusters) == pytest.approx(1.0, abs=1e-6)
    assert sum(c.count for c in clusters) == 500


def test_clusters_sorted_by_weight(config):
    samples = np.array([[255, 0, 0]] * 10 + [[0, 0, 255]] * 30 + [[0, 255, 0]] * 60, dtype=float)
    clusters = ColorQuantizer(config, seed=1).quantize(samples)

    assert [c.rgb for c in clusters] == [(0, 255, 0), (0, 0, 255), (255, 0, 0)]
    assert [c.weight for c in clusters] == pytest.approx([0.6, 0.3, 0.1])


def test_fixed_seed_index_is_idempotent(config):
    rng = np.random.default_rng(11)
    samples = rng.integers(0, 256, size=(300, 3)).astype(np.float64)

    first = ColorQuantizer(config).quantize(samples, seed_index=5)
    second = ColorQuantizer(config).quantize(samples, seed_index=5)
    assert first == second


def test_duplicate_seed_leaves_empty_cluster(config):
    samples = np.array([[255, 0, 0]] * 30 + [[0, 0, 255]] * 10, dtype=float)
    clusters = ColorQuantizer(config).quantize(samples, seed_index=0)

    assert [c.weight for c in clusters] == pytest.approx([0.75, 0.25, 0.0])
    assert clusters[2].count == 0


def test_empty_cluster_keeps_seed_quietly(config):
    import warnings

    samples = np.array([[255, 0, 0]] * 30 + [[0, 0, 255]] * 10, dtype=float)
    with warnings.catch_warnings():
        warnings.simplefilter('error')
        clusters = ColorQuantizer(config).quantize(samples, seed_index=0)

    assert clusters[2].centroid in ((255.0, 0.0, 0.0), (0.0, 0.0, 255.0))


def test_theme_quantizer_settings(config):
    quantizer = ColorQuantizer(config, k=4, iterations=8)
    samples = np.array([[255, 0, 0], [0, 255, 0], [0, 0, 255], [255, 255, 255]] * 5, dtype=float)
    clusters = quantizer.quantize(samples, seed_index=0)
    assert len(clusters) == 4
    assert all(c.weight == pytest.approx(0.25) for c in clusters)


def test_empty_and_malformed_samples(config):
    quantizer = ColorQuantizer(config)
    assert quantizer.quantize(np.empty((0, 3))) == []
    with pytest.raises(ValueError):
        quantizer.quantize(np.zeros((4, 4)))


# Saliency

def test_saliency_border_is_zero(config):
    rng = np.random.default_rng(2)
    frame = rng.integers(0, 256, size=(20, 30, 4), dtype=np.uint8)
    saliency = SaliencyEstimator(config).compute_map(frame)

    assert saliency.shape == (20, 30)
    assert np.all(saliency[0, :] == 0) and np.all(saliency[-1, :] == 0)
    assert np.all(saliency[:, 0] == 0) and np.all(saliency[:, -1] == 0)
    assert saliency[1:-1, 1:-1].max() <= 1.0


def test_saliency_centroid_on_bright_square(config):
    frame = create_test_frame([((20, 20, 20), 40)], width=60)
    frame[22:28, 34:40, :3] = 255

    # the square edges are the only pixels above the flat baseline, so keep the top 1%
    centroid = SaliencyEstimator(config, quantile=1).estimate(frame)
    assert centroid is not None
    assert centroid[0] == pytest.approx(36.5, abs=1.0)
    assert centroid[1] == pytest.approx(24.5, abs=1.0)


def test_saliency_uniform_gray_has_no_focus(config):
    frame = create_test_frame([((128, 128, 128), 30)], width=40)
    estimator = SaliencyEstimator(config, saturation_weight=1.0, saturation_gamma=1.0)
    assert estimator.estimate(frame) is None


def test_saliency_threshold_quantile(config):
    saliency = np.zeros((12, 12))
    saliency[1:-1, 1:-1] = np.arange(100).reshape(10, 10)
    estimator = SaliencyEstimator(config, quantile=5)
    # top 5 of 100 interior values: 99..95
    assert estimator.threshold(saliency) == 95


# Palette and theme

def test_palette_export_text():
    text = palette_export_text(build_palette([(255, 0, 0), (0, 0, 255)]))
    lines = text.splitlines()
    assert len(lines) == 2
    assert lines[0].startswith('Color 1: #FF0000 | RGB(255, 0, 0) | OKLCH(0.63 0.26 29.')
    assert lines[1].startswith('Color 2: #0000FF | RGB(0, 0, 255)')


def test_format_rgb_rounds():
    assert format_rgb((12.4, 12.6, 300)) == 'RGB(12, 13, 255)'


def test_theme_size():
    assert theme_size(1920, 1080) == (128, 72)
    assert theme_size(1000, 200) == (128, 64)


def test_derive_theme_roles(config):
    image = create_test_frame([
        ((20, 20, 60), 26),      # dark navy, heaviest
        ((200, 200, 200), 19),   # light gray
        ((255, 120, 0), 13),     # vivid orange
        ((0, 128, 128), 6),      # teal
    ], width=128)

    theme = derive_theme(image, config, ColorQuantizer(config, k=4, iterations=8, seed=0))
    assert theme.primary == '#14143C'
    assert theme.accent == '#FF7800'
    assert theme.secondary == '#C8C8C8'


def test_derive_theme_transparent_image(config):
    image = create_test_frame([((255, 0, 0), 8)], width=16)
    image[:, :, 3] = 0
    assert derive_theme(image, config) is None
