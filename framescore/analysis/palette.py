"""
Palette formatting and one-shot theme derivation.
Formats stabilized colors for export and picks primary/secondary/accent
roles from a still image.
"""

import logging
import numpy as np
from typing import Dict, Iterable, List, Optional, Sequence
from dataclasses import dataclass

from .color_space import hsv_of, luminance, rgb_hex, rgb_to_oklch, clamp_rgb
from .pixel_filter import opaque_pixels
from .quantizer import ColorQuantizer
from ..config import get_config

logger = logging.getLogger(__name__)


THEME_WIDTH = 128
THEME_MIN_HEIGHT = 64
SECONDARY_MIN_LUMA_GAP = 20


@dataclass(frozen=True)
class PaletteEntry:
    """Display formats of one palette color."""
    hex: str
    rgb: tuple
    oklch: tuple

    @classmethod
    def from_rgb(cls, rgb: Sequence[float]) -> 'PaletteEntry':
        rgb = clamp_rgb(rgb)
        return cls(hex=rgb_hex(rgb), rgb=rgb, oklch=rgb_to_oklch(rgb))


def format_rgb(rgb: Sequence[float]) -> str:
    return 'RGB({})'.format(', '.join(str(c) for c in clamp_rgb(rgb)))


def format_oklch(oklch: Sequence[float]) -> str:
    l, c, h = oklch
    return f'OKLCH({l:.2f} {c:.2f} {h:.1f})'


def build_palette(colors: Iterable[Sequence[float]]) -> List[PaletteEntry]:
    return [PaletteEntry.from_rgb(c) for c in colors]


def palette_export_text(palette: Sequence[PaletteEntry]) -> str:
    """One line per color: ``Color i: #HEX | RGB(r, g, b) | OKLCH(l c h)``."""
    return '\n'.join(
        f'Color {i}: {entry.hex} | {format_rgb(entry.rgb)} | {format_oklch(entry.oklch)}'
        for i, entry in enumerate(palette, start=1)
    )


@dataclass(frozen=True)
class Theme:
    """Colors derived from a reference image."""
    primary: str
    secondary: str
    accent: str

    def as_dict(self) -> Dict[str, str]:
        return {'primary': self.primary, 'secondary': self.secondary, 'accent': self.accent}


def theme_size(width: int, height: int):
    """Analysis size for theme derivation: fixed width, proportional height with a floor."""
    return THEME_WIDTH, max(THEME_MIN_HEIGHT, int(round(height * THEME_WIDTH / width)))


def derive_theme(rgba: np.ndarray, config=None, quantizer: ColorQuantizer = None) -> Optional[Theme]:
    """Derive primary/secondary/accent colors from a theme-sized RGBA image.

    The primary color is the darkest cluster, the accent the most vivid one
    (saturation times value), and the secondary the heaviest cluster whose
    luminance differs noticeably from the primary. Returns None when the
    image has no opaque pixels.
    """
    config = config or get_config()
    if quantizer is None:
        quantizer = ColorQuantizer(config,
                                   k=config.get('quantizer.theme_k', 4),
                                   iterations=config.get('quantizer.theme_iterations', 8))

    samples = opaque_pixels(rgba)
    if not len(samples):
        logger.warning("No opaque pixels to derive a theme from")
        return None

    swatches = []
    for cluster in quantizer.quantize(samples):
        rgb = cluster.rgb
        _, sat, val = hsv_of(rgb)
        swatches.append({'rgb': rgb, 'sat': sat, 'val': val, 'lum': luminance(rgb)})

    primary = min(swatches, key=lambda s: s['lum'])
    accent = max(swatches, key=lambda s: s['sat'] * s['val'])
    secondary = next(
        (s for s in swatches if abs(s['lum'] - primary['lum']) > SECONDARY_MIN_LUMA_GAP),
        swatches[1] if len(swatches) > 1 else swatches[0]
    )

    return Theme(primary=rgb_hex(primary['rgb']),
                 secondary=rgb_hex(secondary['rgb']),
                 accent=rgb_hex(accent['rgb']))
