"""Per-frame color analysis: pixel filtering, quantization, saliency and palettes."""

from .pixel_filter import filter_pixels, opaque_pixels
from .quantizer import ColorQuantizer, ColorCluster
from .saliency import SaliencyEstimator
from .palette import PaletteEntry, Theme, derive_theme, palette_export_text

__all__ = ['filter_pixels', 'opaque_pixels', 'ColorQuantizer', 'ColorCluster',
           'SaliencyEstimator', 'PaletteEntry', 'Theme', 'derive_theme', 'palette_export_text']
